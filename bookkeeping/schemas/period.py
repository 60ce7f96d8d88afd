"""
Pydantic schemas for fiscal periods.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from bookkeeping.models.enums import PeriodStatus


class FiscalPeriodCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def end_after_start(self) -> "FiscalPeriodCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class FiscalPeriodResponse(BaseModel):
    id: int
    organization_id: int
    name: str
    start_date: date
    end_date: date
    status: PeriodStatus
    total_debits: Decimal
    total_credits: Decimal
    journal_entry_count: int
    unclassified_count: int
    processed_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}
