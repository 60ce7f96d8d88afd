"""
Journal entry models.

Each entry is a balanced double-entry posting made of two or more
lines. Within an entry, the sum of debit amounts must equal the sum
of credit amounts. The JournalGenerator enforces this before
anything is added to the session; the line-level CHECK constraint
guarantees each line sits on exactly one side.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Integer, Numeric, ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookkeeping.models.base import Base


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    fiscal_period_id: Mapped[int] = mapped_column(
        ForeignKey("fiscal_periods.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    reference: Mapped[str] = mapped_column(String(100), nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    created_by: Mapped[str] = mapped_column(
        String(100), nullable=False, default="system"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    fiscal_period: Mapped["FiscalPeriod"] = relationship(
        back_populates="journal_entries"
    )
    lines: Mapped[list["JournalEntryLine"]] = relationship(
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryLine.line_number",
    )

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit_amount for line in self.lines), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit_amount for line in self.lines), Decimal("0"))

    def __repr__(self) -> str:
        return f"<JournalEntry {self.reference} {self.entry_date}>"


class JournalEntryLine(Base):
    __tablename__ = "journal_entry_lines"
    __table_args__ = (
        CheckConstraint(
            "(debit_amount > 0 AND credit_amount = 0) OR "
            "(credit_amount > 0 AND debit_amount = 0)",
            name="ck_journal_line_one_side",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="RESTRICT"),
        nullable=False, index=True,
    )
    debit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0.00")
    )
    credit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0.00")
    )
    description: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )
    # Audit back-reference; deliberately not unique because
    # reprocessing deletes and recreates the lines.
    source_transaction_id: Mapped[int | None] = mapped_column(
        ForeignKey("bank_transactions.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )

    journal_entry: Mapped["JournalEntry"] = relationship(
        back_populates="lines"
    )
    account: Mapped["Account"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        if self.debit_amount > 0:
            return f"<JournalEntryLine DR {self.account_id} {self.debit_amount}>"
        return f"<JournalEntryLine CR {self.account_id} {self.credit_amount}>"
