"""
Pydantic schemas for organizations and their chart of accounts.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from bookkeeping.models.enums import AccountType, BalanceSide


# --- Organization Schemas ---

class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    bank_account_code: str | None = Field(
        default=None, min_length=1, max_length=20
    )


class OrganizationResponse(BaseModel):
    id: int
    name: str
    bank_account_code: str
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Chart of Accounts Schemas ---

class AccountCategoryResponse(BaseModel):
    id: int
    key: str
    name: str
    account_type: AccountType
    normal_balance: BalanceSide

    model_config = {"from_attributes": True}


class AccountResponse(BaseModel):
    id: int
    code: str
    name: str
    description: str | None
    category: AccountCategoryResponse
    is_active: bool
    is_bank_account: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ChartInitializationResult(BaseModel):
    """Outcome of seeding a chart of accounts."""
    categories_created: int
    accounts_created: int
    accounts_skipped: int
