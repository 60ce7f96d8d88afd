"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


class BalanceSide(str, enum.Enum):
    """Debit or credit side of the ledger."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    @property
    def opposite(self) -> "BalanceSide":
        if self is BalanceSide.DEBIT:
            return BalanceSide.CREDIT
        return BalanceSide.DEBIT


# Normal balance side for each account type. Assets and expenses
# grow with debits; everything else grows with credits.
NORMAL_BALANCE: dict[AccountType, BalanceSide] = {
    AccountType.ASSET: BalanceSide.DEBIT,
    AccountType.EXPENSE: BalanceSide.DEBIT,
    AccountType.LIABILITY: BalanceSide.CREDIT,
    AccountType.EQUITY: BalanceSide.CREDIT,
    AccountType.REVENUE: BalanceSide.CREDIT,
}


class MatchType(str, enum.Enum):
    """How a mapping rule's pattern is compared to a description."""
    CONTAINS = "CONTAINS"
    EXACT = "EXACT"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    REGEX = "REGEX"


class RuleSource(str, enum.Enum):
    """Provenance of a mapping rule."""
    SYSTEM = "SYSTEM"
    USER = "USER"


class ClassificationSource(str, enum.Enum):
    """What assigned a transaction's account code."""
    RULE = "RULE"
    MANUAL = "MANUAL"


class PeriodStatus(str, enum.Enum):
    """Processing status of a fiscal period."""
    OPEN = "OPEN"
    PROCESSED = "PROCESSED"
