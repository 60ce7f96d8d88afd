"""
Journal generator: turns classified bank transactions into
balanced double-entry journal entries.

Sign convention (bank statement perspective):

    Statement debit (money out):
        DEBIT  classified account
        CREDIT bank account

    Statement credit (money in):
        DEBIT  bank account
        CREDIT classified account

Every entry has exactly two lines of equal amount. Balance is
checked before anything is added to the session, so an unbalanced
entry never reaches the database.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from bookkeeping.errors import (
    ValidationError,
    UnbalancedEntryError,
    account_not_found,
)
from bookkeeping.models.account import Account
from bookkeeping.models.bank_transaction import BankTransaction
from bookkeeping.models.journal_entry import JournalEntry, JournalEntryLine
from bookkeeping.models.organization import Organization
from bookkeeping.schemas.journal import GenerationResult
from bookkeeping.services.period_service import PeriodService

logger = logging.getLogger(__name__)


def entry_reference(transaction: BankTransaction) -> str:
    return f"BT-{transaction.id}"


class JournalGenerator:

    def __init__(self, db: Session):
        self.db = db
        self.periods = PeriodService(db)

    def _account(self, organization_id: int, code: str) -> Account:
        account = self.db.execute(
            select(Account).where(
                Account.organization_id == organization_id,
                Account.code == code,
            )
        ).scalar_one_or_none()
        if not account:
            raise ValidationError(account_not_found(code, organization_id))
        return account

    def existing_entry(self, transaction: BankTransaction) -> JournalEntry | None:
        return self.db.execute(
            select(JournalEntry)
            .join(JournalEntryLine)
            .where(JournalEntryLine.source_transaction_id == transaction.id)
            .limit(1)
        ).unique().scalar_one_or_none()

    def generate(self, transaction: BankTransaction) -> JournalEntry:
        """
        Create the journal entry for one classified transaction.

        If an entry already exists for the transaction it is returned
        unchanged. Raises ValidationError for an unclassified
        transaction, ConflictError when its period is not OPEN and
        UnbalancedEntryError if the lines disagree.
        """
        if transaction.account_code is None:
            raise ValidationError(
                f"Bank transaction {transaction.id} is not classified; "
                f"cannot generate a journal entry"
            )

        existing = self.existing_entry(transaction)
        if existing:
            return existing

        period = self.periods.get_period(
            transaction.organization_id, transaction.fiscal_period_id
        )
        self.periods.require_open(period, "Journal generation")

        organization = self.db.get(Organization, transaction.organization_id)
        bank = self._account(organization.id, organization.bank_account_code)
        target = self._account(organization.id, transaction.account_code)
        amount = transaction.amount

        # Sign convention:
        # Money leaving the bank debits the classified account and
        # credits the bank. Money arriving debits the bank and credits
        # the classified account. Both lines carry the same amount.
        if transaction.is_debit:
            debit_account, credit_account = target, bank
        else:
            debit_account, credit_account = bank, target

        lines = [
            JournalEntryLine(
                line_number=1,
                account_id=debit_account.id,
                debit_amount=amount,
                credit_amount=Decimal("0.00"),
                description=transaction.description,
                source_transaction_id=transaction.id,
            ),
            JournalEntryLine(
                line_number=2,
                account_id=credit_account.id,
                debit_amount=Decimal("0.00"),
                credit_amount=amount,
                description=transaction.description,
                source_transaction_id=transaction.id,
            ),
        ]

        reference = entry_reference(transaction)
        self.check_balanced(reference, lines)

        entry = JournalEntry(
            organization_id=organization.id,
            fiscal_period_id=transaction.fiscal_period_id,
            reference=reference,
            entry_date=transaction.transaction_date,
            description=transaction.description,
            lines=lines,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    @staticmethod
    def check_balanced(reference: str, lines: list[JournalEntryLine]) -> None:
        """Raise UnbalancedEntryError unless debits equal credits."""
        total_debits = sum((line.debit_amount for line in lines), Decimal("0"))
        total_credits = sum((line.credit_amount for line in lines), Decimal("0"))
        if total_debits != total_credits or total_debits <= 0:
            raise UnbalancedEntryError(reference, total_debits, total_credits)

    def generate_for_period(
        self, organization_id: int, period_id: int
    ) -> GenerationResult:
        """
        Generate entries for every classified transaction in the
        period that does not have one yet.
        """
        period = self.periods.get_period(organization_id, period_id)
        self.periods.require_open(period, "Journal generation")

        already_posted = select(JournalEntryLine.source_transaction_id).where(
            JournalEntryLine.source_transaction_id.is_not(None)
        )
        pending = self.db.execute(
            select(BankTransaction)
            .where(
                BankTransaction.organization_id == organization_id,
                BankTransaction.fiscal_period_id == period_id,
                BankTransaction.account_code.is_not(None),
                BankTransaction.id.not_in(already_posted),
            )
            .order_by(BankTransaction.transaction_date, BankTransaction.id)
        ).scalars().all()
        classified_total = self.db.execute(
            select(BankTransaction.id).where(
                BankTransaction.organization_id == organization_id,
                BankTransaction.fiscal_period_id == period_id,
                BankTransaction.account_code.is_not(None),
            )
        ).scalars().all()

        for txn in pending:
            self.generate(txn)

        result = GenerationResult(
            created=len(pending),
            skipped=len(classified_total) - len(pending),
        )
        logger.info(
            "Generated %d journal entries for period %s (organization %s), "
            "%d already posted",
            result.created, period_id, organization_id, result.skipped,
        )
        return result
