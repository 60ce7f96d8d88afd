"""
Tests for the LedgerService.

Tests cover:
- Opening balance derivation for the bank account
- Opening Balance Equity seeding
- Closing balance arithmetic by normal side
- Presentation of negative balances on the opposite side
- General ledger running balances
- Bank reconciliation gaps
"""

from datetime import date
from decimal import Decimal

import pytest

from bookkeeping.errors import NotFoundError
from bookkeeping.models.enums import BalanceSide
from bookkeeping.schemas.period import FiscalPeriodCreate
from bookkeeping.schemas.transaction import BankTransactionCreate
from bookkeeping.services.classifier import Classifier
from bookkeeping.services.journal_generator import JournalGenerator
from bookkeeping.services.ledger_service import (
    LedgerService,
    presentation,
    signed_closing,
)
from bookkeeping.services.period_service import PeriodService


@pytest.fixture
def posted(db_session, organization, period, statement):
    Classifier(db_session).auto_classify_period(organization.id, period.id)
    JournalGenerator(db_session).generate_for_period(organization.id, period.id)
    db_session.commit()
    return statement


class TestBalanceArithmetic:

    def test_debit_normal(self):
        closing = signed_closing(
            BalanceSide.DEBIT, Decimal("100.00"), Decimal("50.00"), Decimal("30.00")
        )
        assert closing == Decimal("120.00")

    def test_credit_normal(self):
        closing = signed_closing(
            BalanceSide.CREDIT, Decimal("100.00"), Decimal("50.00"), Decimal("30.00")
        )
        assert closing == Decimal("80.00")

    def test_negative_balance_moves_to_opposite_side(self):
        assert presentation(BalanceSide.DEBIT, Decimal("-25.00")) == (
            Decimal("25.00"), BalanceSide.CREDIT,
        )
        assert presentation(BalanceSide.CREDIT, Decimal("40.00")) == (
            Decimal("40.00"), BalanceSide.CREDIT,
        )


class TestOpeningBalance:

    def test_bank_opening_derived_from_first_line(self, db_session, organization, period, statement):
        # First line: 1,210.00 out leaving 478,297.94
        opening = LedgerService(db_session).opening_balance(
            organization.id, "1100", period.id
        )
        assert opening == Decimal("479507.94")

    def test_first_line_chosen_by_date_then_id(self, db_session, organization, period):
        PeriodService(db_session).import_transactions(organization.id, period.id, [
            BankTransactionCreate(
                transaction_date=date(2024, 1, 20), description="LATER",
                debit_amount=Decimal("1.00"), balance=Decimal("10.00"),
            ),
            BankTransactionCreate(
                transaction_date=date(2024, 1, 5), description="EARLIER",
                credit_amount=Decimal("100.00"), balance=Decimal("600.00"),
            ),
        ])
        db_session.commit()

        assert LedgerService(db_session).bank_opening_balance(
            organization.id, period.id
        ) == Decimal("500.00")

    def test_opening_balance_equity_mirrors_bank(self, db_session, organization, period, statement):
        ledger = LedgerService(db_session)
        assert ledger.opening_balance(organization.id, "5300", period.id) == Decimal("479507.94")

    def test_other_accounts_open_at_zero(self, db_session, organization, period, statement):
        ledger = LedgerService(db_session)
        assert ledger.opening_balance(organization.id, "8200", period.id) == Decimal("0.00")

    def test_empty_period_opens_at_zero(self, db_session, organization, period):
        ledger = LedgerService(db_session)
        assert ledger.opening_balance(organization.id, "1100", period.id) == Decimal("0.00")

    def test_unknown_account(self, db_session, organization, period):
        with pytest.raises(NotFoundError):
            LedgerService(db_session).opening_balance(organization.id, "0000", period.id)


class TestClosingBalance:

    def test_bank_closing_balance(self, db_session, organization, period, posted):
        balance = LedgerService(db_session).closing_balance(
            organization.id, "1100", period.id
        )
        assert balance.opening_balance == Decimal("479507.94")
        assert balance.period_debits == Decimal("25000.00")
        assert balance.period_credits == Decimal("6310.50")
        assert balance.closing_balance == Decimal("498197.44")
        assert balance.side == BalanceSide.DEBIT

    def test_revenue_is_credit_normal(self, db_session, organization, period, posted):
        balance = LedgerService(db_session).closing_balance(
            organization.id, "6100", period.id
        )
        assert balance.closing_balance == Decimal("25000.00")
        assert balance.side == BalanceSide.CREDIT

    def test_account_balances_lists_accounts_with_activity(self, db_session, organization, period, posted):
        balances = LedgerService(db_session).account_balances(organization.id, period.id)
        codes = [b.account_code for b in balances]
        assert codes == ["1100", "5300", "6100", "8100", "8200", "9600"]

    def test_balances_are_scoped_to_period(self, db_session, organization, period, posted):
        february = PeriodService(db_session).create_period(
            organization.id,
            FiscalPeriodCreate(
                name="February 2024",
                start_date=date(2024, 2, 1),
                end_date=date(2024, 2, 29),
            ),
        )
        db_session.commit()

        assert LedgerService(db_session).account_balances(organization.id, february.id) == []


class TestAccountLedger:

    def test_running_balance(self, db_session, organization, period, posted):
        ledger = LedgerService(db_session).account_ledger(
            organization.id, "1100", period.id
        )
        running = [line.running_balance for line in ledger.lines]
        assert running == [
            Decimal("478297.94"),
            Decimal("473297.94"),
            Decimal("498297.94"),
            Decimal("498282.44"),
            Decimal("498197.44"),
        ]
        assert ledger.closing_balance == Decimal("498197.44")

    def test_ledger_agrees_with_closing_balance(self, db_session, organization, period, posted):
        service = LedgerService(db_session)
        for code in ("1100", "6100", "8200", "9600"):
            ledger = service.account_ledger(organization.id, code, period.id)
            balance = service.closing_balance(organization.id, code, period.id)
            assert ledger.closing_balance == balance.closing_balance


class TestReconcile:

    def test_unclassified_line_leaves_gap(self, db_session, organization, period, posted):
        result = LedgerService(db_session).reconcile(organization.id, period.id)

        assert result.statement_closing_balance == Decimal("497897.44")
        assert result.ledger_closing_balance == Decimal("498197.44")
        assert result.difference == Decimal("300.00")
        assert result.unclassified_count == 1
        assert result.is_reconciled is False

    def test_reconciles_once_everything_is_posted(self, db_session, organization, period, posted):
        Classifier(db_session).classify_manually(
            organization.id, posted[4].id, "8710", "alice"
        )
        JournalGenerator(db_session).generate_for_period(organization.id, period.id)
        db_session.commit()

        result = LedgerService(db_session).reconcile(organization.id, period.id)
        assert result.difference == Decimal("0.00")
        assert result.is_reconciled is True
