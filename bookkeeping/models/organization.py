"""
Organization model.

An organization exclusively owns its chart of accounts, mapping
rules, fiscal periods, bank transactions and journal entries.
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookkeeping.models.base import Base


class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(150), unique=True, nullable=False
    )
    bank_account_code: Mapped[str] = mapped_column(
        String(20), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    categories: Mapped[list["AccountCategory"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )
    accounts: Mapped[list["Account"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )
    mapping_rules: Mapped[list["MappingRule"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )
    fiscal_periods: Mapped[list["FiscalPeriod"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Organization {self.name}>"
