"""
Pydantic schemas for bank statement transactions.

BankTransactionCreate is the import boundary: statement parsers
hand over one of these per statement line.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from bookkeeping.models.enums import ClassificationSource


class BankTransactionCreate(BaseModel):
    """
    One statement line.

    debit_amount is money leaving the bank account, credit_amount
    is money entering it. Exactly one of the two must be positive.
    balance is the running balance printed on the statement after
    this line.
    """
    transaction_date: date
    description: str = Field(min_length=1, max_length=500)
    reference: str | None = Field(default=None, max_length=100)
    debit_amount: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    credit_amount: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    balance: Decimal | None = Field(default=None, decimal_places=2)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be blank")
        return v.strip()

    @model_validator(mode="after")
    def exactly_one_side(self) -> "BankTransactionCreate":
        has_debit = self.debit_amount > 0
        has_credit = self.credit_amount > 0
        if has_debit == has_credit:
            raise ValueError(
                "exactly one of debit_amount and credit_amount must be positive"
            )
        return self


class BankTransactionResponse(BaseModel):
    id: int
    fiscal_period_id: int
    transaction_date: date
    description: str
    reference: str | None
    debit_amount: Decimal
    credit_amount: Decimal
    balance: Decimal | None
    account_code: str | None
    classification_source: ClassificationSource | None
    classified_by: str | None
    classified_at: datetime | None

    model_config = {"from_attributes": True}


class ManualClassificationRequest(BaseModel):
    """Override a transaction's account code by hand."""
    account_code: str = Field(min_length=1, max_length=20)
    user: str = Field(min_length=1, max_length=100)


class ImportResult(BaseModel):
    fiscal_period_id: int
    imported: int


class ClassificationRunResult(BaseModel):
    """Outcome of a batch classification pass over a period."""
    examined: int
    classified: int
    unclassified: int


class AccountClassificationCount(BaseModel):
    account_code: str
    count: int


class ClassificationSummary(BaseModel):
    total: int
    classified: int
    unclassified: int
    manual: int
    by_account: list[AccountClassificationCount]
