"""
Tests for the JournalGenerator.

Tests cover:
- Sign convention for money out and money in
- Balanced two-line entries
- Rejection of unclassified and unbalanced input
- Skipping transactions that already have an entry
- Batch generation for a period
- Refusing to post into a PROCESSED period
"""

from decimal import Decimal

import pytest

from bookkeeping.errors import ConflictError, UnbalancedEntryError, ValidationError
from bookkeeping.models.journal_entry import JournalEntry, JournalEntryLine
from bookkeeping.schemas.rule import MappingRuleCreate
from bookkeeping.services.classifier import Classifier
from bookkeeping.services.journal_generator import JournalGenerator
from bookkeeping.services.reprocessor import Reprocessor
from bookkeeping.services.rule_catalog import RuleCatalog


@pytest.fixture
def classified(db_session, organization, period, statement):
    Classifier(db_session).auto_classify_period(organization.id, period.id)
    db_session.commit()
    return statement


class TestGenerate:

    def test_money_out_debits_expense_credits_bank(self, db_session, classified):
        rent = classified[1]
        entry = JournalGenerator(db_session).generate(rent)
        db_session.commit()

        debit, credit = entry.lines
        assert debit.account.code == "8200"
        assert debit.debit_amount == Decimal("5000.00")
        assert debit.credit_amount == Decimal("0.00")
        assert credit.account.code == "1100"
        assert credit.credit_amount == Decimal("5000.00")
        assert credit.debit_amount == Decimal("0.00")

    def test_money_in_debits_bank_credits_revenue(self, db_session, classified):
        receipt = classified[2]
        entry = JournalGenerator(db_session).generate(receipt)
        db_session.commit()

        debit, credit = entry.lines
        assert debit.account.code == "1100"
        assert debit.debit_amount == Decimal("25000.00")
        assert credit.account.code == "6100"
        assert credit.credit_amount == Decimal("25000.00")

    def test_entry_is_balanced_and_linked(self, db_session, classified):
        rent = classified[1]
        entry = JournalGenerator(db_session).generate(rent)
        db_session.commit()

        assert len(entry.lines) == 2
        assert entry.total_debits == entry.total_credits
        assert entry.entry_date == rent.transaction_date
        assert entry.fiscal_period_id == rent.fiscal_period_id
        assert {line.source_transaction_id for line in entry.lines} == {rent.id}

    def test_existing_entry_returned_unchanged(self, db_session, classified):
        generator = JournalGenerator(db_session)
        first = generator.generate(classified[1])
        db_session.commit()
        second = generator.generate(classified[1])

        assert second.id == first.id
        assert db_session.query(JournalEntry).count() == 1

    def test_unclassified_rejected(self, db_session, classified):
        with pytest.raises(ValidationError, match="not classified"):
            JournalGenerator(db_session).generate(classified[4])

    def test_unbalanced_lines_rejected(self):
        lines = [
            JournalEntryLine(
                line_number=1, account_id=1,
                debit_amount=Decimal("10.00"), credit_amount=Decimal("0.00"),
            ),
            JournalEntryLine(
                line_number=2, account_id=2,
                debit_amount=Decimal("0.00"), credit_amount=Decimal("9.99"),
            ),
        ]
        with pytest.raises(UnbalancedEntryError) as exc:
            JournalGenerator.check_balanced("BT-1", lines)
        assert exc.value.total_debits == Decimal("10.00")
        assert exc.value.total_credits == Decimal("9.99")


class TestGenerateForPeriod:

    def test_generates_for_classified_only(self, db_session, organization, period, classified):
        result = JournalGenerator(db_session).generate_for_period(
            organization.id, period.id
        )
        db_session.commit()

        assert result.created == 5
        assert result.skipped == 0
        assert db_session.query(JournalEntry).count() == 5
        assert db_session.query(JournalEntryLine).count() == 10

    def test_second_run_creates_nothing(self, db_session, organization, period, classified):
        generator = JournalGenerator(db_session)
        generator.generate_for_period(organization.id, period.id)
        db_session.commit()
        result = generator.generate_for_period(organization.id, period.id)

        assert result.created == 0
        assert result.skipped == 5

    def test_processed_period_rejected(self, db_session, organization, period, statement):
        Reprocessor(db_session).process(organization.id, period.id)
        RuleCatalog(db_session).create_custom_rule(organization.id, MappingRuleCreate(
            name="Mystery vendor", pattern="MYSTERY VENDOR", account_code="8710",
        ))
        db_session.commit()

        generator = JournalGenerator(db_session)
        with pytest.raises(ConflictError, match="OPEN"):
            generator.generate_for_period(organization.id, period.id)

        statement[4].account_code = "8710"
        with pytest.raises(ConflictError):
            generator.generate(statement[4])
        db_session.rollback()

        assert db_session.query(JournalEntry).count() == 5
        assert period.journal_entry_count == 5
