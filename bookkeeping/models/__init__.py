"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from bookkeeping.models.base import Base
from bookkeeping.models.enums import (
    AccountType,
    BalanceSide,
    NORMAL_BALANCE,
    MatchType,
    RuleSource,
    ClassificationSource,
    PeriodStatus,
)
from bookkeeping.models.organization import Organization
from bookkeeping.models.account import AccountCategory, Account
from bookkeeping.models.mapping_rule import MappingRule
from bookkeeping.models.fiscal_period import FiscalPeriod
from bookkeeping.models.bank_transaction import BankTransaction
from bookkeeping.models.journal_entry import JournalEntry, JournalEntryLine
from bookkeeping.models.audit_log import AuditLog

__all__ = [
    "Base",
    "AccountType",
    "BalanceSide",
    "NORMAL_BALANCE",
    "MatchType",
    "RuleSource",
    "ClassificationSource",
    "PeriodStatus",
    "Organization",
    "AccountCategory",
    "Account",
    "MappingRule",
    "FiscalPeriod",
    "BankTransaction",
    "JournalEntry",
    "JournalEntryLine",
    "AuditLog",
]
