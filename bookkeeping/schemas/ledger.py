"""
Pydantic schemas for ledger balances, the general ledger view,
the trial balance and bank reconciliation.

These are computed views. Nothing here is stored; every value is
derived from journal lines and the bank statement on request.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, computed_field

from bookkeeping.models.enums import AccountType, BalanceSide


class AccountBalance(BaseModel):
    """
    Balance of one account for one fiscal period.

    closing_balance is signed in the account's normal direction.
    amount and side give the presentation: a negative closing
    balance is shown as a positive amount on the opposite side.
    """
    account_id: int
    account_code: str
    account_name: str
    account_type: AccountType
    normal_balance: BalanceSide
    opening_balance: Decimal
    period_debits: Decimal
    period_credits: Decimal
    closing_balance: Decimal
    amount: Decimal
    side: BalanceSide


class LedgerLine(BaseModel):
    """One posting in the general ledger view of an account."""
    entry_date: date
    reference: str
    description: str | None
    debit_amount: Decimal
    credit_amount: Decimal
    running_balance: Decimal
    source_transaction_id: int | None


class AccountLedger(BaseModel):
    account_code: str
    account_name: str
    normal_balance: BalanceSide
    opening_balance: Decimal
    lines: list[LedgerLine]
    closing_balance: Decimal


class TrialBalanceRow(BaseModel):
    account_code: str
    account_name: str
    debit: Decimal
    credit: Decimal


class TrialBalance(BaseModel):
    organization_id: int
    fiscal_period_id: int
    rows: list[TrialBalanceRow]
    total_debits: Decimal
    total_credits: Decimal

    @computed_field
    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits


class ReconciliationResult(BaseModel):
    """
    Bank account per the ledger against the bank statement.

    A non-zero difference is reported, never posted away.
    """
    account_code: str
    opening_balance: Decimal
    ledger_closing_balance: Decimal
    statement_closing_balance: Decimal | None
    difference: Decimal
    unclassified_count: int
    is_reconciled: bool
