"""
Tests for the Reprocessor.

Tests cover:
- Processing an OPEN period and the resulting totals
- State machine enforcement
- Reprocess idempotence
- Manual classifications surviving a reprocess
- Manual overrides in a PROCESSED period
- Rollback when a step fails part-way
- Status rejections leaving the session alone
- Per-period locking and serialized runs
"""

import logging
import threading
from datetime import date
from decimal import Decimal

import pytest

from bookkeeping.errors import (
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from bookkeeping.models.audit_log import AuditLog
from bookkeeping.models.enums import ClassificationSource, PeriodStatus
from bookkeeping.models.journal_entry import JournalEntry
from bookkeeping.schemas.period import FiscalPeriodCreate
from bookkeeping.schemas.rule import MappingRuleCreate
from bookkeeping.schemas.transaction import BankTransactionCreate
from bookkeeping.services.classifier import Classifier
from bookkeeping.services.journal_generator import JournalGenerator
from bookkeeping.services.period_service import PeriodService
from bookkeeping.services.reprocessor import PeriodLockRegistry, Reprocessor
from bookkeeping.services.rule_catalog import RuleCatalog
from bookkeeping.services.trial_balance import TrialBalanceAggregator


def snapshot(db_session, organization, period):
    """Everything a reprocess run may change, in comparable form."""
    db_session.refresh(period)
    tb = TrialBalanceAggregator(db_session).trial_balance(organization.id, period.id)
    entries = db_session.query(JournalEntry).filter_by(
        fiscal_period_id=period.id
    ).order_by(JournalEntry.entry_date, JournalEntry.reference).all()
    return {
        "status": period.status,
        "totals": (period.total_debits, period.total_credits),
        "counts": (period.journal_entry_count, period.unclassified_count),
        "rows": [(r.account_code, r.debit, r.credit) for r in tb.rows],
        "entries": [
            (e.reference, [(l.account.code, l.debit_amount, l.credit_amount)
                           for l in e.lines])
            for e in entries
        ],
    }


class TestProcess:

    def test_process_open_period(self, db_session, organization, period, statement):
        result = Reprocessor(db_session).process(organization.id, period.id)

        assert result.status == PeriodStatus.PROCESSED
        assert result.total_debits == Decimal("504507.94")
        assert result.total_credits == Decimal("504507.94")
        assert result.journal_entry_count == 5
        assert result.unclassified_count == 1
        assert result.processed_at is not None

    def test_process_twice_rejected(self, db_session, organization, period, statement):
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)

        with pytest.raises(InvalidStateTransitionError):
            reprocessor.process(organization.id, period.id)

    def test_reprocess_requires_processed(self, db_session, organization, period, statement):
        with pytest.raises(InvalidStateTransitionError, match="OPEN"):
            Reprocessor(db_session).reprocess(organization.id, period.id)

    def test_unknown_period(self, db_session, organization):
        with pytest.raises(NotFoundError):
            Reprocessor(db_session).process(organization.id, 999)


class TestReprocess:

    def test_reprocess_is_idempotent(self, db_session, organization, period, statement):
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)
        before = snapshot(db_session, organization, period)

        reprocessor.reprocess(organization.id, period.id)
        first = snapshot(db_session, organization, period)
        reprocessor.reprocess(organization.id, period.id)
        second = snapshot(db_session, organization, period)

        assert first == before
        assert second == first

    def test_reprocess_picks_up_new_rules(self, db_session, organization, period, statement):
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)

        RuleCatalog(db_session).create_custom_rule(organization.id, MappingRuleCreate(
            name="Mystery vendor", pattern="MYSTERY VENDOR", account_code="8710",
        ))
        db_session.commit()
        result = reprocessor.reprocess(organization.id, period.id)

        assert result.status == PeriodStatus.PROCESSED
        assert result.unclassified_count == 0
        assert result.journal_entry_count == 6

    def test_reprocess_preserves_manual_classification(self, db_session, organization, period, statement):
        Classifier(db_session).classify_manually(
            organization.id, statement[1].id, "8000", "alice"
        )
        db_session.commit()
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)

        reprocessor.reprocess(organization.id, period.id)
        db_session.refresh(statement[1])

        assert statement[1].account_code == "8000"
        assert statement[1].classification_source == ClassificationSource.MANUAL
        entry = JournalGenerator(db_session).existing_entry(statement[1])
        assert entry.lines[0].account.code == "8000"

    def test_reprocess_is_audited(self, db_session, organization, period, statement):
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)
        reprocessor.reprocess(organization.id, period.id)

        audit = db_session.query(AuditLog).filter_by(
            event_type="PERIOD_REPROCESSED"
        ).one()
        assert '"deleted_entries": 5' in audit.details

    def test_failure_rolls_back_everything(self, db_session, organization, period, statement, monkeypatch):
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)
        before = snapshot(db_session, organization, period)

        def explode(self, organization_id, period_id):
            raise RuntimeError("generation failed")

        monkeypatch.setattr(JournalGenerator, "generate_for_period", explode)

        with pytest.raises(RuntimeError, match="generation failed"):
            reprocessor.reprocess(organization.id, period.id)

        monkeypatch.undo()
        assert snapshot(db_session, organization, period) == before
        assert db_session.query(AuditLog).filter_by(
            event_type="PERIOD_REPROCESSED"
        ).count() == 0


class TestManualOverride:

    def test_override_rebuilds_processed_period(self, db_session, organization, period, statement):
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)

        txn = reprocessor.classify_manually(
            organization.id, period.id, statement[4].id, "8710", "alice"
        )
        db_session.refresh(period)

        assert txn.account_code == "8710"
        assert txn.classification_source == ClassificationSource.MANUAL
        assert period.status == PeriodStatus.PROCESSED
        assert period.journal_entry_count == 6
        assert period.unclassified_count == 0
        assert period.total_debits == Decimal("504507.94")
        assert JournalGenerator(db_session).existing_entry(txn) is not None

    def test_override_is_audited(self, db_session, organization, period, statement):
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)
        reprocessor.classify_manually(
            organization.id, period.id, statement[4].id, "8710", "alice"
        )

        events = {a.event_type for a in db_session.query(AuditLog).all()}
        assert {"MANUAL_CLASSIFICATION", "PERIOD_REPROCESSED"} <= events

    def test_open_period_rejected(self, db_session, organization, period, statement):
        with pytest.raises(InvalidStateTransitionError):
            Reprocessor(db_session).classify_manually(
                organization.id, period.id, statement[4].id, "8710", "alice"
            )

    def test_unknown_account_rolls_back(self, db_session, organization, period, statement):
        reprocessor = Reprocessor(db_session)
        reprocessor.process(organization.id, period.id)
        before = snapshot(db_session, organization, period)

        with pytest.raises(ValidationError, match="not found"):
            reprocessor.classify_manually(
                organization.id, period.id, statement[4].id, "0000", "alice"
            )

        assert snapshot(db_session, organization, period) == before


class TestStatusRejection:

    def test_rejection_keeps_pending_work(self, db_session, organization, period, statement):
        organization.name = "Renamed Holdings"

        with pytest.raises(InvalidStateTransitionError):
            Reprocessor(db_session).reprocess(organization.id, period.id)

        assert organization.name == "Renamed Holdings"
        assert organization in db_session.dirty

    def test_rejection_is_not_logged_as_failure(self, db_session, organization, period, statement, caplog):
        with caplog.at_level(logging.ERROR, logger="bookkeeping.services.reprocessor"):
            with pytest.raises(InvalidStateTransitionError):
                Reprocessor(db_session).reprocess(organization.id, period.id)

        assert caplog.records == []


class TestPeriodLockRegistry:

    def test_same_period_shares_a_lock(self):
        registry = PeriodLockRegistry()
        assert registry.lock_for(1, 1) is registry.lock_for(1, 1)

    def test_different_periods_do_not(self):
        registry = PeriodLockRegistry()
        assert registry.lock_for(1, 1) is not registry.lock_for(1, 2)
        assert registry.lock_for(1, 1) is not registry.lock_for(2, 1)

    def test_lock_released_after_failure(self, db_session, organization, period, statement):
        registry = PeriodLockRegistry()
        reprocessor = Reprocessor(db_session, locks=registry)

        with pytest.raises(InvalidStateTransitionError):
            reprocessor.reprocess(organization.id, period.id)

        assert not registry.lock_for(organization.id, period.id).locked()


@pytest.fixture
def february(db_session, organization, period, statement):
    """A second period, processed alongside the processed January."""
    service = PeriodService(db_session)
    feb = service.create_period(organization.id, FiscalPeriodCreate(
        name="February 2024",
        start_date=date(2024, 2, 1),
        end_date=date(2024, 2, 29),
    ))
    service.import_transactions(organization.id, feb.id, [
        BankTransactionCreate(
            transaction_date=date(2024, 2, 5),
            description="OFFICE RENT FEBRUARY",
            debit_amount=Decimal("5000.00"),
            balance=Decimal("492897.44"),
        ),
    ])
    db_session.commit()
    reprocessor = Reprocessor(db_session)
    reprocessor.process(organization.id, period.id)
    reprocessor.process(organization.id, feb.id)
    return feb


class TestConcurrentReprocess:
    """
    Runs reprocess on worker threads, each with its own session. The
    January run is held inside its unit of work until released.
    """

    def hold_period(self, monkeypatch, period_id):
        entered = []
        started = threading.Event()
        release = threading.Event()
        original = Reprocessor._delete_journal_entries

        def delete_entries(reprocessor, organization_id, target_period_id):
            entered.append(target_period_id)
            if target_period_id == period_id:
                started.set()
                release.wait(timeout=10)
            return original(reprocessor, organization_id, target_period_id)

        monkeypatch.setattr(Reprocessor, "_delete_journal_entries", delete_entries)
        return entered, started, release

    def worker(self, session_factory, locks, organization_id, period_id, errors):
        def run():
            session = session_factory()
            try:
                Reprocessor(session, locks=locks).reprocess(organization_id, period_id)
            except Exception as e:
                errors.append(e)
            finally:
                session.close()
        return threading.Thread(target=run)

    def test_same_period_runs_one_at_a_time(
        self, db_session, session_factory, monkeypatch, organization, period, february
    ):
        entered, started, release = self.hold_period(monkeypatch, period.id)
        locks = PeriodLockRegistry()
        errors = []
        first = self.worker(session_factory, locks, organization.id, period.id, errors)
        second = self.worker(session_factory, locks, organization.id, period.id, errors)

        first.start()
        assert started.wait(timeout=5)
        second.start()
        second.join(timeout=0.5)

        assert second.is_alive()
        assert entered == [period.id]

        release.set()
        first.join(timeout=10)
        second.join(timeout=10)

        assert errors == []
        assert entered == [period.id, period.id]
        db_session.expire_all()
        assert period.status == PeriodStatus.PROCESSED
        assert period.journal_entry_count == 5

    def test_other_period_is_not_blocked(
        self, db_session, session_factory, monkeypatch, organization, period, february
    ):
        entered, started, release = self.hold_period(monkeypatch, period.id)
        locks = PeriodLockRegistry()
        errors = []
        january_run = self.worker(session_factory, locks, organization.id, period.id, errors)
        february_run = self.worker(session_factory, locks, organization.id, february.id, errors)

        january_run.start()
        assert started.wait(timeout=5)
        february_run.start()
        february_run.join(timeout=10)

        assert not february_run.is_alive()
        assert january_run.is_alive()
        assert entered == [period.id, february.id]

        release.set()
        january_run.join(timeout=10)

        assert errors == []
        db_session.expire_all()
        assert period.status == PeriodStatus.PROCESSED
        assert february.status == PeriodStatus.PROCESSED
        assert february.journal_entry_count == 1
