"""
Fiscal period model.

A period scopes bank transactions and journal entries and carries
the aggregate totals written when it is processed. Processing
status follows a small state machine.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookkeeping.models.base import Base
from bookkeeping.models.enums import PeriodStatus


# Valid state transitions. The source of truth for the state machine
VALID_TRANSITIONS: dict[PeriodStatus, set[PeriodStatus]] = {
    PeriodStatus.OPEN: {PeriodStatus.PROCESSED},
    PeriodStatus.PROCESSED: {PeriodStatus.OPEN},
}


class FiscalPeriod(Base):
    __tablename__ = "fiscal_periods"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[PeriodStatus] = mapped_column(
        SAEnum(
            PeriodStatus,
            name="period_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=PeriodStatus.OPEN,
    )
    total_debits: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0.00")
    )
    total_credits: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0.00")
    )
    journal_entry_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    unclassified_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    organization: Mapped["Organization"] = relationship(
        back_populates="fiscal_periods"
    )
    transactions: Mapped[list["BankTransaction"]] = relationship(
        back_populates="fiscal_period", cascade="all, delete-orphan"
    )
    journal_entries: Mapped[list["JournalEntry"]] = relationship(
        back_populates="fiscal_period", cascade="all, delete-orphan"
    )

    def can_transition_to(self, new_status: PeriodStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return f"<FiscalPeriod {self.name} ({self.status.value})>"
