"""
Organization and chart of accounts endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookkeeping.api.errors import http_error
from bookkeeping.models.base import get_db
from bookkeeping.services.organization_service import OrganizationService
from bookkeeping.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    AccountResponse,
    ChartInitializationResult,
)

router = APIRouter(prefix="/organizations", tags=["Organizations"])


@router.post("", response_model=OrganizationResponse, status_code=201)
def create_organization(
    request: OrganizationCreate,
    db: Session = Depends(get_db),
):
    """
    Create an organization.

    The standard chart of accounts and the system mapping rules
    are seeded in the same transaction.
    """
    service = OrganizationService(db)
    try:
        organization = service.create_organization(request)
        db.commit()
        return organization
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.get("", response_model=list[OrganizationResponse])
def list_organizations(db: Session = Depends(get_db)):
    return OrganizationService(db).list_organizations()


@router.get("/{organization_id}", response_model=OrganizationResponse)
def get_organization(
    organization_id: int,
    db: Session = Depends(get_db),
):
    try:
        return OrganizationService(db).get_organization(organization_id)
    except ValueError as e:
        raise http_error(e)


@router.get(
    "/{organization_id}/accounts",
    response_model=list[AccountResponse],
)
def list_accounts(
    organization_id: int,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    """Chart of accounts, ordered by code."""
    try:
        return OrganizationService(db).list_accounts(
            organization_id, include_inactive=include_inactive
        )
    except ValueError as e:
        raise http_error(e)


@router.post(
    "/{organization_id}/accounts/initialize",
    response_model=ChartInitializationResult,
)
def initialize_chart(
    organization_id: int,
    db: Session = Depends(get_db),
):
    """Add any standard accounts the organization is missing."""
    service = OrganizationService(db)
    try:
        result = service.initialize_chart(organization_id)
        db.commit()
        return result
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.post(
    "/{organization_id}/accounts/{account_code}/deactivate",
    response_model=AccountResponse,
)
def deactivate_account(
    organization_id: int,
    account_code: str,
    db: Session = Depends(get_db),
):
    service = OrganizationService(db)
    try:
        account = service.deactivate_account(organization_id, account_code)
        db.commit()
        return account
    except ValueError as e:
        db.rollback()
        raise http_error(e)
