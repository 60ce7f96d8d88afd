"""
Chart of accounts models.

Categories carry the normal balance side; accounts hang off a
category. Once an account is referenced by a journal line it is
never deleted, only deactivated via is_active=False.
"""

from datetime import datetime

from sqlalchemy import (
    String, Boolean, DateTime, ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookkeeping.models.base import Base
from bookkeeping.models.enums import AccountType, BalanceSide


class AccountCategory(Base):
    __tablename__ = "account_categories"
    __table_args__ = (
        UniqueConstraint(
            "organization_id", "key", name="uq_category_org_key"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    key: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum"),
        nullable=False,
    )
    normal_balance: Mapped[BalanceSide] = mapped_column(
        SAEnum(BalanceSide, name="balance_side_enum"),
        nullable=False,
    )

    organization: Mapped["Organization"] = relationship(
        back_populates="categories"
    )
    accounts: Mapped[list["Account"]] = relationship(
        back_populates="category"
    )

    def __repr__(self) -> str:
        return f"<AccountCategory {self.name} ({self.normal_balance.value})>"


class Account(Base):
    """A single account in an organization's chart of accounts."""

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint(
            "organization_id", "code", name="uq_account_org_code"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("account_categories.id"), nullable=False
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    is_bank_account: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    organization: Mapped["Organization"] = relationship(
        back_populates="accounts"
    )
    category: Mapped["AccountCategory"] = relationship(
        back_populates="accounts", lazy="joined"
    )

    @property
    def normal_balance(self) -> BalanceSide:
        return self.category.normal_balance

    def __repr__(self) -> str:
        return f"<Account {self.code} {self.name}>"
