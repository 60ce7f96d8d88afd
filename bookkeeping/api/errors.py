"""
Mapping from bookkeeping errors to HTTP responses.
"""

from fastapi import HTTPException

from bookkeeping.errors import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    TrialBalanceMismatchError,
)


def http_error(error: ValueError) -> HTTPException:
    """
    NotFound -> 404, Conflict (including invalid period
    transitions) -> 409, Consistency -> 500, anything else -> 400.
    """
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, TrialBalanceMismatchError):
        return HTTPException(status_code=500, detail={
            "message": str(error),
            "organization_id": error.organization_id,
            "fiscal_period_id": error.fiscal_period_id,
            "total_debits": str(error.total_debits),
            "total_credits": str(error.total_credits),
            "difference": str(error.difference),
        })
    if isinstance(error, ConsistencyError):
        return HTTPException(status_code=500, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))
