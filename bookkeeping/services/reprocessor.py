"""
Reprocessor: runs a fiscal period through classification, journal
generation and aggregation as one unit of work.

Period state machine:

    OPEN --process--> PROCESSED --reprocess--> OPEN --> PROCESSED

Unlike the other services, the reprocessor owns its transaction:
it commits when the whole run succeeds and rolls back on any
exception, leaving the period exactly as it was before the call.
A status check that fails is rejected before any work starts and
does not touch the session.

A PROCESSED period can only change through this module. Manual
overrides in such a period go through classify_manually here, which
rebuilds the period in the same unit.

Runs against the same (organization, period) are serialized by an
in-process lock plus a row lock on the period. Different periods
run concurrently.
"""

import logging
import threading
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, delete, func
from sqlalchemy.orm import Session

from bookkeeping.errors import (
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
    period_not_found,
)
from bookkeeping.models.bank_transaction import BankTransaction
from bookkeeping.models.enums import PeriodStatus
from bookkeeping.models.fiscal_period import FiscalPeriod
from bookkeeping.models.journal_entry import JournalEntry, JournalEntryLine
from bookkeeping.schemas.journal import GenerationResult
from bookkeeping.schemas.transaction import ClassificationRunResult
from bookkeeping.services.audit import record_event
from bookkeeping.services.classifier import Classifier
from bookkeeping.services.journal_generator import JournalGenerator
from bookkeeping.services.period_service import PeriodService
from bookkeeping.services.trial_balance import TrialBalanceAggregator

logger = logging.getLogger(__name__)


class PeriodLockRegistry:
    """One lock per (organization, period), created on first use."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple[int, int], threading.Lock] = {}

    def lock_for(self, organization_id: int, period_id: int) -> threading.Lock:
        key = (organization_id, period_id)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock


period_locks = PeriodLockRegistry()


class Reprocessor:

    def __init__(self, db: Session, locks: PeriodLockRegistry | None = None):
        self.db = db
        self.locks = locks or period_locks
        self.periods = PeriodService(db)
        self.classifier = Classifier(db)
        self.generator = JournalGenerator(db)
        self.aggregator = TrialBalanceAggregator(db)

    def _lock_period(self, organization_id: int, period_id: int) -> FiscalPeriod:
        period = self.db.execute(
            select(FiscalPeriod)
            .where(
                FiscalPeriod.id == period_id,
                FiscalPeriod.organization_id == organization_id,
            )
            .with_for_update()
        ).scalar_one_or_none()
        if not period:
            raise NotFoundError(period_not_found(period_id, organization_id))
        return period

    def _require_status(self, period: FiscalPeriod, expected: PeriodStatus,
                        requested: PeriodStatus) -> None:
        if period.status != expected:
            raise InvalidStateTransitionError(
                period.id, period.status.value, requested.value
            )

    def _delete_journal_entries(self, organization_id: int, period_id: int) -> int:
        entry_ids = self.db.execute(
            select(JournalEntry.id).where(
                JournalEntry.organization_id == organization_id,
                JournalEntry.fiscal_period_id == period_id,
            )
        ).scalars().all()
        if entry_ids:
            self.db.execute(
                delete(JournalEntryLine).where(
                    JournalEntryLine.journal_entry_id.in_(entry_ids)
                )
            )
            self.db.execute(
                delete(JournalEntry).where(JournalEntry.id.in_(entry_ids))
            )
        return len(entry_ids)

    def _aggregate(self, period: FiscalPeriod) -> None:
        """Write period totals from the trial balance and mark PROCESSED."""
        trial_balance = self.aggregator.trial_balance(
            period.organization_id, period.id
        )
        period.total_debits = trial_balance.total_debits
        period.total_credits = trial_balance.total_credits
        period.journal_entry_count = self.db.execute(
            select(func.count(JournalEntry.id)).where(
                JournalEntry.fiscal_period_id == period.id
            )
        ).scalar()
        period.unclassified_count = self.db.execute(
            select(func.count(BankTransaction.id)).where(
                BankTransaction.fiscal_period_id == period.id,
                BankTransaction.account_code.is_(None),
            )
        ).scalar()
        period.processed_at = datetime.utcnow()
        self.periods.transition(period, PeriodStatus.PROCESSED)
        self.db.flush()

    def _rebuild(
        self, period: FiscalPeriod
    ) -> tuple[int, ClassificationRunResult, GenerationResult]:
        """
        Rebuild an OPEN period's derived data and mark it PROCESSED.

        Returns the number of entries deleted with the classification
        and generation outcomes.
        """
        organization_id, period_id = period.organization_id, period.id

        # Lines go before their entries, then the stored totals are
        # cleared. Classification and generation read the flushed state.
        deleted = self._delete_journal_entries(organization_id, period_id)
        period.total_debits = Decimal("0.00")
        period.total_credits = Decimal("0.00")
        period.journal_entry_count = 0
        period.unclassified_count = 0
        period.processed_at = None
        self.db.flush()

        classification = self.classifier.auto_classify_period(
            organization_id, period_id, reclassify=True
        )
        generation = self.generator.generate_for_period(organization_id, period_id)
        self._aggregate(period)
        return deleted, classification, generation

    def process(self, organization_id: int, period_id: int) -> FiscalPeriod:
        """
        Classify, generate and aggregate an OPEN period.

        Only unclassified transactions are classified; entries already
        generated are kept.
        """
        with self.locks.lock_for(organization_id, period_id):
            # A wrong status is a plain rejection: nothing has been
            # written yet and the caller's session is left alone.
            period = self._lock_period(organization_id, period_id)
            self._require_status(period, PeriodStatus.OPEN, PeriodStatus.PROCESSED)

            try:
                self.classifier.auto_classify_period(organization_id, period_id)
                self.generator.generate_for_period(organization_id, period_id)
                self._aggregate(period)

                self.db.commit()
            except Exception:
                self.db.rollback()
                logger.exception(
                    "Processing period %s for organization %s failed; "
                    "rolled back", period_id, organization_id,
                )
                raise

        logger.info(
            "Processed period %s for organization %s: %d entries, "
            "%d unclassified, totals %s/%s",
            period_id, organization_id, period.journal_entry_count,
            period.unclassified_count, period.total_debits, period.total_credits,
        )
        return period

    def reprocess(self, organization_id: int, period_id: int) -> FiscalPeriod:
        """
        Rebuild a PROCESSED period from its bank transactions.

        All derived journal entries are deleted, rule-based
        classifications are recomputed (manual ones are kept), entries
        are regenerated and totals are recomputed. Running it twice
        with unchanged rules and chart gives identical results.
        """
        with self.locks.lock_for(organization_id, period_id):
            period = self._lock_period(organization_id, period_id)
            self._require_status(period, PeriodStatus.PROCESSED, PeriodStatus.OPEN)

            try:
                self.periods.transition(period, PeriodStatus.OPEN)
                deleted, classification, generation = self._rebuild(period)

                record_event(
                    self.db, organization_id, "PERIOD_REPROCESSED",
                    fiscal_period_id=period_id,
                    deleted_entries=deleted,
                    created_entries=generation.created,
                    unclassified=classification.unclassified,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                logger.exception(
                    "Reprocessing period %s for organization %s failed; "
                    "rolled back", period_id, organization_id,
                )
                raise

        logger.info(
            "Reprocessed period %s for organization %s: %d entries deleted, "
            "%d created, %d unclassified",
            period_id, organization_id, deleted,
            generation.created, classification.unclassified,
        )
        return period

    def classify_manually(
        self,
        organization_id: int,
        period_id: int,
        transaction_id: int,
        account_code: str,
        user: str,
    ) -> BankTransaction:
        """
        Override one transaction's account in a PROCESSED period.

        The override and the rebuild it calls for run as one reprocess
        unit, so the period never reads PROCESSED with stale totals.
        """
        with self.locks.lock_for(organization_id, period_id):
            period = self._lock_period(organization_id, period_id)
            self._require_status(period, PeriodStatus.PROCESSED, PeriodStatus.OPEN)
            txn = self.periods.get_transaction(organization_id, transaction_id)
            if txn.fiscal_period_id != period_id:
                raise ValidationError(
                    f"Bank transaction {transaction_id} is not in period {period_id}"
                )

            try:
                self.periods.transition(period, PeriodStatus.OPEN)
                self.classifier.classify_manually(
                    organization_id, transaction_id, account_code, user
                )
                deleted, classification, generation = self._rebuild(period)

                record_event(
                    self.db, organization_id, "PERIOD_REPROCESSED",
                    fiscal_period_id=period_id,
                    deleted_entries=deleted,
                    created_entries=generation.created,
                    unclassified=classification.unclassified,
                    manual_transaction_id=transaction_id,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                logger.exception(
                    "Manual classification of transaction %s in period %s "
                    "failed; rolled back", transaction_id, period_id,
                )
                raise

        logger.info(
            "Transaction %s reclassified to %s in processed period %s; "
            "%d entries rebuilt",
            transaction_id, account_code, period_id, generation.created,
        )
        return txn
