"""
Ledger service: account balances derived from journal lines.

Balances are never stored. Every figure is recomputed from the
journal lines of a fiscal period plus a derived opening balance:

- The organization's bank account opens at the balance the
  statement shows before its first line:
  balance_after + debit - credit of the earliest transaction
  (by date, then id).
- The Opening Balance Equity account opens at the same amount on
  its credit side, so the trial balance still balances.
- Every other account opens at zero.

For DEBIT-normal accounts (assets, expenses):
    closing = opening + debits - credits
For CREDIT-normal accounts (liabilities, equity, revenue):
    closing = opening + credits - debits

A negative closing balance is reported as a positive amount on the
opposite side.
"""

import logging
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from bookkeeping.config import get_settings
from bookkeeping.errors import NotFoundError, account_not_found
from bookkeeping.models.account import Account
from bookkeeping.models.bank_transaction import BankTransaction
from bookkeeping.models.enums import BalanceSide
from bookkeeping.models.journal_entry import JournalEntry, JournalEntryLine
from bookkeeping.models.organization import Organization
from bookkeeping.schemas.ledger import (
    AccountBalance,
    AccountLedger,
    LedgerLine,
    ReconciliationResult,
)
from bookkeeping.services.period_service import PeriodService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(CENT)


def signed_closing(
    normal_balance: BalanceSide,
    opening: Decimal,
    debits: Decimal,
    credits: Decimal,
) -> Decimal:
    if normal_balance == BalanceSide.DEBIT:
        return opening + debits - credits
    return opening + credits - debits


def presentation(normal_balance: BalanceSide, closing: Decimal) -> tuple[Decimal, BalanceSide]:
    """Reported amount (never negative) and the side it sits on."""
    if closing < 0:
        return -closing, normal_balance.opposite
    return closing, normal_balance


class LedgerService:
    """
    Read-only balance queries over the journal.

    The service takes a database session as a constructor argument
    and never writes through it.
    """

    def __init__(self, db: Session):
        self.db = db
        self.periods = PeriodService(db)

    def _account(self, organization_id: int, account_code: str) -> Account:
        account = self.db.execute(
            select(Account).where(
                Account.organization_id == organization_id,
                Account.code == account_code,
            )
        ).scalar_one_or_none()
        if not account:
            raise NotFoundError(account_not_found(account_code, organization_id))
        return account

    def bank_opening_balance(self, organization_id: int, period_id: int) -> Decimal:
        """
        Balance before the first statement line of the period.

        Zero when the period has no transactions or the first line
        carries no running balance.
        """
        first = self.db.execute(
            select(BankTransaction)
            .where(
                BankTransaction.organization_id == organization_id,
                BankTransaction.fiscal_period_id == period_id,
            )
            .order_by(BankTransaction.transaction_date, BankTransaction.id)
            .limit(1)
        ).scalar_one_or_none()
        if first is None:
            return ZERO
        if first.balance is None:
            logger.warning(
                "First transaction %s of period %s has no running balance; "
                "bank opening balance taken as zero",
                first.id, period_id,
            )
            return ZERO
        return to_money(first.balance + first.debit_amount - first.credit_amount)

    # --- Opening balances ---
    # Only the bank account carries an opening into a period. It is
    # derived from the first statement line, and the equity account
    # takes the same amount so the trial balance stays even. Every
    # other account opens at zero.
    def _seeded_openings(self, organization_id: int, period_id: int) -> dict[str, Decimal]:
        organization = self.db.get(Organization, organization_id)
        opening = self.bank_opening_balance(organization_id, period_id)
        return {
            organization.bank_account_code: opening,
            get_settings().OPENING_BALANCE_EQUITY_CODE: opening,
        }

    def opening_balance(
        self, organization_id: int, account_code: str, period_id: int
    ) -> Decimal:
        """Signed opening balance of an account in its normal direction."""
        self.periods.get_period(organization_id, period_id)
        self._account(organization_id, account_code)
        return self._seeded_openings(organization_id, period_id).get(account_code, ZERO)

    def _period_totals(
        self, organization_id: int, period_id: int
    ) -> dict[int, tuple[Decimal, Decimal]]:
        rows = self.db.execute(
            select(
                JournalEntryLine.account_id,
                func.coalesce(func.sum(JournalEntryLine.debit_amount), 0),
                func.coalesce(func.sum(JournalEntryLine.credit_amount), 0),
            )
            .join(JournalEntry, JournalEntryLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalEntry.organization_id == organization_id,
                JournalEntry.fiscal_period_id == period_id,
            )
            .group_by(JournalEntryLine.account_id)
        ).all()
        return {
            account_id: (to_money(debits), to_money(credits))
            for account_id, debits, credits in rows
        }

    def _balance(
        self,
        account: Account,
        opening: Decimal,
        debits: Decimal,
        credits: Decimal,
    ) -> AccountBalance:
        normal = account.normal_balance
        closing = signed_closing(normal, opening, debits, credits)
        amount, side = presentation(normal, closing)
        return AccountBalance(
            account_id=account.id,
            account_code=account.code,
            account_name=account.name,
            account_type=account.category.account_type,
            normal_balance=normal,
            opening_balance=opening,
            period_debits=debits,
            period_credits=credits,
            closing_balance=closing,
            amount=amount,
            side=side,
        )

    def closing_balance(
        self, organization_id: int, account_code: str, period_id: int
    ) -> AccountBalance:
        self.periods.get_period(organization_id, period_id)
        account = self._account(organization_id, account_code)
        opening = self._seeded_openings(organization_id, period_id).get(account_code, ZERO)
        debits, credits = self._period_totals(organization_id, period_id).get(
            account.id, (ZERO, ZERO)
        )
        return self._balance(account, opening, debits, credits)

    def account_balances(
        self, organization_id: int, period_id: int
    ) -> list[AccountBalance]:
        """
        Balances of every account with period activity or a seeded
        opening balance, ordered by account code.

        Inactive accounts are included when they carry postings.
        """
        self.periods.get_period(organization_id, period_id)
        openings = self._seeded_openings(organization_id, period_id)
        totals = self._period_totals(organization_id, period_id)

        accounts = self.db.execute(
            select(Account)
            .where(Account.organization_id == organization_id)
            .order_by(Account.code)
        ).scalars().all()

        balances = []
        for account in accounts:
            opening = openings.get(account.code, ZERO)
            if account.id not in totals and opening == 0:
                continue
            debits, credits = totals.get(account.id, (ZERO, ZERO))
            balances.append(self._balance(account, opening, debits, credits))
        return balances

    def account_ledger(
        self, organization_id: int, account_code: str, period_id: int
    ) -> AccountLedger:
        """General ledger view of one account with a running balance."""
        self.periods.get_period(organization_id, period_id)
        account = self._account(organization_id, account_code)
        normal = account.normal_balance
        opening = self._seeded_openings(organization_id, period_id).get(account_code, ZERO)

        rows = self.db.execute(
            select(JournalEntryLine, JournalEntry)
            .join(JournalEntry, JournalEntryLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalEntry.organization_id == organization_id,
                JournalEntry.fiscal_period_id == period_id,
                JournalEntryLine.account_id == account.id,
            )
            .order_by(
                JournalEntry.entry_date,
                JournalEntry.id,
                JournalEntryLine.line_number,
            )
        ).all()

        running = opening
        lines = []
        for line, entry in rows:
            debit = to_money(line.debit_amount)
            credit = to_money(line.credit_amount)
            running = signed_closing(normal, running, debit, credit)
            lines.append(LedgerLine(
                entry_date=entry.entry_date,
                reference=entry.reference,
                description=line.description,
                debit_amount=debit,
                credit_amount=credit,
                running_balance=running,
                source_transaction_id=line.source_transaction_id,
            ))

        return AccountLedger(
            account_code=account.code,
            account_name=account.name,
            normal_balance=normal,
            opening_balance=opening,
            lines=lines,
            closing_balance=running,
        )

    def reconcile(self, organization_id: int, period_id: int) -> ReconciliationResult:
        """
        Compare the bank account per the ledger with the statement.

        The statement closing balance is the running balance of the
        last transaction (by date, then id). Unclassified transactions
        have no journal entry, so each one opens a gap. A gap is
        logged and reported; it is never posted away.
        """
        self.periods.get_period(organization_id, period_id)
        organization = self.db.get(Organization, organization_id)
        bank = self.closing_balance(
            organization_id, organization.bank_account_code, period_id
        )

        last = self.db.execute(
            select(BankTransaction)
            .where(
                BankTransaction.organization_id == organization_id,
                BankTransaction.fiscal_period_id == period_id,
            )
            .order_by(
                BankTransaction.transaction_date.desc(),
                BankTransaction.id.desc(),
            )
            .limit(1)
        ).scalar_one_or_none()
        unclassified = self.db.execute(
            select(func.count(BankTransaction.id)).where(
                BankTransaction.organization_id == organization_id,
                BankTransaction.fiscal_period_id == period_id,
                BankTransaction.account_code.is_(None),
            )
        ).scalar()

        statement_closing = None
        if last is not None and last.balance is not None:
            statement_closing = to_money(last.balance)

        if statement_closing is None:
            difference = ZERO
            reconciled = False
        else:
            difference = bank.closing_balance - statement_closing
            reconciled = abs(difference) <= get_settings().RECONCILIATION_TOLERANCE

        if not reconciled:
            logger.warning(
                "Bank reconciliation gap for organization %s, period %s: "
                "ledger=%s statement=%s difference=%s unclassified=%d",
                organization_id, period_id, bank.closing_balance,
                statement_closing, difference, unclassified,
            )

        return ReconciliationResult(
            account_code=bank.account_code,
            opening_balance=bank.opening_balance,
            ledger_closing_balance=bank.closing_balance,
            statement_closing_balance=statement_closing,
            difference=difference,
            unclassified_count=unclassified,
            is_reconciled=reconciled,
        )
