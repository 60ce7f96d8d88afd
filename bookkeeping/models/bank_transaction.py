"""
Bank transaction model.

One line of a bank statement. Only the classification fields
(account_code, classification_source, classified_by, classified_at)
change after import.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, CheckConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookkeeping.models.base import Base
from bookkeeping.models.enums import ClassificationSource


class BankTransaction(Base):
    __tablename__ = "bank_transactions"
    __table_args__ = (
        CheckConstraint(
            "(debit_amount > 0 AND credit_amount = 0) OR "
            "(credit_amount > 0 AND debit_amount = 0)",
            name="ck_bank_transaction_one_side",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    fiscal_period_id: Mapped[int] = mapped_column(
        ForeignKey("fiscal_periods.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    reference: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    # Statement-side amounts: debit is money leaving the account,
    # credit is money entering it.
    debit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0.00")
    )
    credit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0.00")
    )
    balance: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 2), nullable=True
    )
    account_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True, index=True
    )
    classification_source: Mapped[ClassificationSource | None] = mapped_column(
        SAEnum(ClassificationSource, name="classification_source_enum"),
        nullable=True,
    )
    classified_by: Mapped[str | None] = mapped_column(
        String(200), nullable=True
    )
    classified_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    fiscal_period: Mapped["FiscalPeriod"] = relationship(
        back_populates="transactions"
    )

    @property
    def is_debit(self) -> bool:
        """True when money left the bank account."""
        return self.debit_amount > 0

    @property
    def amount(self) -> Decimal:
        return self.debit_amount if self.is_debit else self.credit_amount

    @property
    def is_classified(self) -> bool:
        return self.account_code is not None

    def __repr__(self) -> str:
        side = "DR" if self.is_debit else "CR"
        return (
            f"<BankTransaction {self.transaction_date} {side} "
            f"{self.amount} '{self.description}'>"
        )
