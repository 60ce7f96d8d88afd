"""
Pydantic schemas for journal entries.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel


class JournalEntryLineResponse(BaseModel):
    id: int
    line_number: int
    account_id: int
    account_code: str
    debit_amount: Decimal
    credit_amount: Decimal
    description: str | None
    source_transaction_id: int | None


class JournalEntryResponse(BaseModel):
    id: int
    fiscal_period_id: int
    reference: str
    entry_date: date
    description: str
    created_by: str
    created_at: datetime
    lines: list[JournalEntryLineResponse]

    @classmethod
    def from_entry(cls, entry) -> "JournalEntryResponse":
        """Flatten an entry and its lines, resolving account codes."""
        return cls(
            id=entry.id,
            fiscal_period_id=entry.fiscal_period_id,
            reference=entry.reference,
            entry_date=entry.entry_date,
            description=entry.description,
            created_by=entry.created_by,
            created_at=entry.created_at,
            lines=[
                JournalEntryLineResponse(
                    id=line.id,
                    line_number=line.line_number,
                    account_id=line.account_id,
                    account_code=line.account.code,
                    debit_amount=line.debit_amount,
                    credit_amount=line.credit_amount,
                    description=line.description,
                    source_transaction_id=line.source_transaction_id,
                )
                for line in entry.lines
            ],
        )


class GenerationResult(BaseModel):
    """Outcome of generating journal entries for a period."""
    created: int
    skipped: int
