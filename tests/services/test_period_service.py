"""
Tests for the PeriodService.

Tests cover:
- Period creation and overlap detection
- Statement import validation
- Period state transitions
"""

from datetime import date
from decimal import Decimal

import pytest

from bookkeeping.errors import (
    ConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from bookkeeping.models.enums import PeriodStatus
from bookkeeping.schemas.period import FiscalPeriodCreate
from bookkeeping.schemas.transaction import BankTransactionCreate
from bookkeeping.services.period_service import PeriodService


class TestCreatePeriod:

    def test_new_period_is_open(self, period):
        assert period.status == PeriodStatus.OPEN
        assert period.total_debits == Decimal("0.00")
        assert period.journal_entry_count == 0

    def test_overlap_rejected(self, db_session, organization, period):
        with pytest.raises(ConflictError, match="overlaps"):
            PeriodService(db_session).create_period(
                organization.id,
                FiscalPeriodCreate(
                    name="Mid January",
                    start_date=date(2024, 1, 15),
                    end_date=date(2024, 2, 15),
                ),
            )

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError, match="end_date"):
            FiscalPeriodCreate(
                name="Backwards",
                start_date=date(2024, 2, 1),
                end_date=date(2024, 1, 1),
            )

    def test_period_of_other_organization_not_found(self, db_session, organization, period):
        with pytest.raises(NotFoundError):
            PeriodService(db_session).get_period(organization.id + 1, period.id)


class TestImportTransactions:

    def test_import(self, db_session, organization, period, statement):
        assert len(statement) == 6
        assert all(t.account_code is None for t in statement)
        assert statement[0].is_debit
        assert statement[0].amount == Decimal("1210.00")
        assert not statement[2].is_debit

    def test_statement_order(self, db_session, organization, period, statement):
        listed = PeriodService(db_session).list_transactions(organization.id, period.id)
        assert [t.id for t in listed] == [t.id for t in statement]

    def test_date_outside_period_rejects_batch(self, db_session, organization, period):
        service = PeriodService(db_session)
        with pytest.raises(ValidationError, match="outside fiscal period"):
            service.import_transactions(organization.id, period.id, [
                BankTransactionCreate(
                    transaction_date=date(2024, 1, 5), description="INSIDE",
                    debit_amount=Decimal("1.00"),
                ),
                BankTransactionCreate(
                    transaction_date=date(2024, 2, 5), description="OUTSIDE",
                    debit_amount=Decimal("1.00"),
                ),
            ])
        assert service.list_transactions(organization.id, period.id) == []

    def test_both_sides_rejected(self):
        with pytest.raises(ValueError, match="exactly one"):
            BankTransactionCreate(
                transaction_date=date(2024, 1, 5), description="BOTH",
                debit_amount=Decimal("1.00"), credit_amount=Decimal("1.00"),
            )

    def test_neither_side_rejected(self):
        with pytest.raises(ValueError, match="exactly one"):
            BankTransactionCreate(
                transaction_date=date(2024, 1, 5), description="NEITHER",
            )

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            BankTransactionCreate(
                transaction_date=date(2024, 1, 5), description="NEGATIVE",
                debit_amount=Decimal("-5.00"),
            )

    def test_import_into_processed_period_rejected(self, db_session, organization, period):
        period.status = PeriodStatus.PROCESSED
        db_session.commit()

        with pytest.raises(ConflictError, match="OPEN"):
            PeriodService(db_session).import_transactions(organization.id, period.id, [])


class TestTransitions:

    def test_valid_transitions(self, db_session, period):
        service = PeriodService(db_session)
        service.transition(period, PeriodStatus.PROCESSED)
        assert period.status == PeriodStatus.PROCESSED
        service.transition(period, PeriodStatus.OPEN)
        assert period.status == PeriodStatus.OPEN

    def test_invalid_transition(self, db_session, period):
        with pytest.raises(InvalidStateTransitionError) as exc:
            PeriodService(db_session).transition(period, PeriodStatus.OPEN)
        assert exc.value.current == "OPEN"
        assert exc.value.requested == "OPEN"
