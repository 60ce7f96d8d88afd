"""
Period service: fiscal periods and statement import.

import_transactions() is the boundary with statement parsers: it
accepts already-parsed statement lines and stores them unclassified.
Transactions are immutable after import apart from their
classification fields.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from bookkeeping.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    InvalidStateTransitionError,
    organization_not_found,
    period_not_found,
    transaction_not_found,
)
from bookkeeping.models.bank_transaction import BankTransaction
from bookkeeping.models.enums import PeriodStatus
from bookkeeping.models.fiscal_period import FiscalPeriod
from bookkeeping.models.organization import Organization
from bookkeeping.schemas.period import FiscalPeriodCreate
from bookkeeping.schemas.transaction import BankTransactionCreate

logger = logging.getLogger(__name__)


class PeriodService:

    def __init__(self, db: Session):
        self.db = db

    def create_period(
        self, organization_id: int, request: FiscalPeriodCreate
    ) -> FiscalPeriod:
        """
        Create an OPEN fiscal period.

        Periods of one organization may not overlap.
        """
        if not self.db.get(Organization, organization_id):
            raise NotFoundError(organization_not_found(organization_id))

        overlapping = self.db.execute(
            select(FiscalPeriod).where(
                FiscalPeriod.organization_id == organization_id,
                FiscalPeriod.start_date <= request.end_date,
                FiscalPeriod.end_date >= request.start_date,
            ).limit(1)
        ).scalar_one_or_none()
        if overlapping:
            raise ConflictError(
                f"Fiscal period overlaps existing period "
                f"'{overlapping.name}' ({overlapping.start_date} to "
                f"{overlapping.end_date})"
            )

        period = FiscalPeriod(
            organization_id=organization_id,
            name=request.name,
            start_date=request.start_date,
            end_date=request.end_date,
            status=PeriodStatus.OPEN,
        )
        self.db.add(period)
        self.db.flush()
        return period

    def get_period(self, organization_id: int, period_id: int) -> FiscalPeriod:
        period = self.db.get(FiscalPeriod, period_id)
        if not period or period.organization_id != organization_id:
            raise NotFoundError(period_not_found(period_id, organization_id))
        return period

    def list_periods(self, organization_id: int) -> list[FiscalPeriod]:
        if not self.db.get(Organization, organization_id):
            raise NotFoundError(organization_not_found(organization_id))
        return list(
            self.db.execute(
                select(FiscalPeriod)
                .where(FiscalPeriod.organization_id == organization_id)
                .order_by(FiscalPeriod.start_date)
            ).scalars().all()
        )

    def transition(self, period: FiscalPeriod, new_status: PeriodStatus) -> None:
        """Move a period through its state machine or raise."""
        if not period.can_transition_to(new_status):
            raise InvalidStateTransitionError(
                period.id, period.status.value, new_status.value
            )
        period.status = new_status

    def require_open(self, period: FiscalPeriod, action: str) -> None:
        """
        Reject changes to a period's derived data unless it is OPEN.

        A PROCESSED period is only rebuilt through the reprocessor,
        which keeps its stored totals and counts in step.
        """
        if period.status != PeriodStatus.OPEN:
            raise ConflictError(
                f"Fiscal period {period.id} is {period.status.value}; "
                f"{action} requires an OPEN period. Reprocess the period "
                f"to rebuild it"
            )

    def import_transactions(
        self,
        organization_id: int,
        period_id: int,
        transactions: list[BankTransactionCreate],
    ) -> list[BankTransaction]:
        """
        Store parsed statement lines in an OPEN period.

        Every line must fall inside the period's date range. The
        whole batch is rejected if any line does not.
        """
        period = self.get_period(organization_id, period_id)
        self.require_open(period, "importing transactions")

        for item in transactions:
            if not (period.start_date <= item.transaction_date <= period.end_date):
                raise ValidationError(
                    f"Transaction dated {item.transaction_date} "
                    f"('{item.description}') is outside fiscal period "
                    f"{period.start_date} to {period.end_date}"
                )

        created = []
        for item in transactions:
            txn = BankTransaction(
                organization_id=organization_id,
                fiscal_period_id=period_id,
                transaction_date=item.transaction_date,
                description=item.description,
                reference=item.reference,
                debit_amount=item.debit_amount,
                credit_amount=item.credit_amount,
                balance=item.balance,
            )
            self.db.add(txn)
            created.append(txn)
        self.db.flush()

        logger.info(
            "Imported %d transactions into period %s for organization %s",
            len(created), period_id, organization_id,
        )
        return created

    def list_transactions(
        self,
        organization_id: int,
        period_id: int,
        unclassified_only: bool = False,
    ) -> list[BankTransaction]:
        """Transactions of a period in statement order (date, then id)."""
        self.get_period(organization_id, period_id)
        query = select(BankTransaction).where(
            BankTransaction.organization_id == organization_id,
            BankTransaction.fiscal_period_id == period_id,
        )
        if unclassified_only:
            query = query.where(BankTransaction.account_code.is_(None))
        query = query.order_by(
            BankTransaction.transaction_date, BankTransaction.id
        )
        return list(self.db.execute(query).scalars().all())

    def get_transaction(
        self, organization_id: int, transaction_id: int
    ) -> BankTransaction:
        txn = self.db.get(BankTransaction, transaction_id)
        if not txn or txn.organization_id != organization_id:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn
