"""Bookkeeping error types.

Every error derives from ValueError so callers that already catch
ValueError (the API layer, batch jobs) keep working. Structural
invariant violations carry enough context to diagnose without
re-deriving state.
"""

from decimal import Decimal


class BookkeepingError(ValueError):
    """Base class for bookkeeping-level errors."""


class ValidationError(BookkeepingError):
    """Invalid input or failed validation."""


class NotFoundError(BookkeepingError):
    """Requested entity does not exist in the given scope."""


class ConflictError(BookkeepingError):
    """Conflict with existing data, such as a uniqueness violation."""


class InvalidStateTransitionError(ConflictError):
    """A fiscal period cannot move from its current status to the requested one."""

    def __init__(self, period_id: int, current: str, requested: str):
        self.period_id = period_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Fiscal period {period_id} cannot transition "
            f"from {current} to {requested}"
        )


class UnbalancedEntryError(BookkeepingError):
    """A journal entry whose debits and credits disagree."""

    def __init__(self, reference: str, total_debits: Decimal, total_credits: Decimal):
        self.reference = reference
        self.total_debits = total_debits
        self.total_credits = total_credits
        super().__init__(
            f"Journal entry {reference} does not balance: "
            f"debits={total_debits}, credits={total_credits}"
        )


class ConsistencyError(BookkeepingError):
    """A cross-account consistency check failed."""


class TrialBalanceMismatchError(ConsistencyError):
    """Total debits and total credits of a trial balance disagree."""

    def __init__(
        self,
        organization_id: int,
        fiscal_period_id: int,
        total_debits: Decimal,
        total_credits: Decimal,
    ):
        self.organization_id = organization_id
        self.fiscal_period_id = fiscal_period_id
        self.total_debits = total_debits
        self.total_credits = total_credits
        self.difference = total_debits - total_credits
        super().__init__(
            f"Trial balance for organization {organization_id}, "
            f"period {fiscal_period_id} does not balance: "
            f"debits={total_debits}, credits={total_credits}, "
            f"difference={self.difference}"
        )


def organization_not_found(organization_id: int) -> str:
    return f"Organization {organization_id} not found"


def period_not_found(fiscal_period_id: int, organization_id: int) -> str:
    return (
        f"Fiscal period {fiscal_period_id} not found "
        f"for organization {organization_id}"
    )


def account_not_found(account_code: str, organization_id: int) -> str:
    return (
        f"Account '{account_code}' not found "
        f"for organization {organization_id}"
    )


def transaction_not_found(transaction_id: int) -> str:
    return f"Bank transaction {transaction_id} not found"


def rule_not_found(rule_id: int) -> str:
    return f"Mapping rule {rule_id} not found"
