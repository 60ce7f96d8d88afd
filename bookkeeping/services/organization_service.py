"""
Organization service: organizations and their chart of accounts.

Creating an organization seeds its chart of accounts from
chart_definition and its SYSTEM mapping rules from the rule
catalog, so a new organization can classify straight away.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookkeeping import chart_definition
from bookkeeping.config import get_settings
from bookkeeping.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    organization_not_found,
    account_not_found,
)
from bookkeeping.models.account import Account, AccountCategory
from bookkeeping.models.organization import Organization
from bookkeeping.schemas.organization import (
    OrganizationCreate,
    ChartInitializationResult,
)
from bookkeeping.services.rule_catalog import RuleCatalog

logger = logging.getLogger(__name__)


class OrganizationService:

    def __init__(self, db: Session):
        self.db = db

    def create_organization(self, request: OrganizationCreate) -> Organization:
        """
        Create an organization with its chart of accounts and
        system rules.

        Raises ConflictError if the name is taken, ValidationError
        if the requested bank account is not a bank account in the
        standard chart.
        """
        existing = self.db.execute(
            select(Organization).where(Organization.name == request.name)
        ).scalar_one_or_none()
        if existing:
            raise ConflictError(
                f"Organization '{request.name}' already exists"
            )

        settings = get_settings()
        bank_code = request.bank_account_code or settings.DEFAULT_BANK_ACCOUNT_CODE
        if bank_code not in chart_definition.account_codes():
            raise ValidationError(
                f"Bank account code '{bank_code}' is not in the chart of accounts"
            )
        # Statement lines post against this account and its derived
        # opening is mirrored in equity. It must be a flagged bank account.
        if bank_code not in chart_definition.bank_account_codes():
            raise ValidationError(
                f"Account '{bank_code}' is not a bank account; choose one of "
                f"{', '.join(sorted(chart_definition.bank_account_codes()))}"
            )

        organization = Organization(
            name=request.name,
            bank_account_code=bank_code,
        )
        self.db.add(organization)
        try:
            self.db.flush()
        except IntegrityError:
            raise ConflictError(
                f"Organization '{request.name}' already exists"
            )

        self.initialize_chart(organization.id)
        RuleCatalog(self.db).sync_system_rules(organization.id)

        logger.info(
            "Created organization %s (%s), bank account %s",
            organization.id, organization.name, bank_code,
        )
        return organization

    def get_organization(self, organization_id: int) -> Organization:
        organization = self.db.get(Organization, organization_id)
        if not organization:
            raise NotFoundError(organization_not_found(organization_id))
        return organization

    def list_organizations(self) -> list[Organization]:
        return list(
            self.db.execute(
                select(Organization).order_by(Organization.id)
            ).scalars().all()
        )

    def initialize_chart(self, organization_id: int) -> ChartInitializationResult:
        """
        Seed the standard categories and accounts.

        Idempotent: categories and account codes that already exist
        for the organization are left alone.
        """
        self.get_organization(organization_id)

        categories = {
            c.key: c
            for c in self.db.execute(
                select(AccountCategory).where(
                    AccountCategory.organization_id == organization_id
                )
            ).scalars().all()
        }
        categories_created = 0
        for definition in chart_definition.CATEGORIES:
            if definition.key in categories:
                continue
            category = AccountCategory(
                organization_id=organization_id,
                key=definition.key,
                name=definition.name,
                account_type=definition.account_type,
                normal_balance=definition.normal_balance,
            )
            self.db.add(category)
            categories[definition.key] = category
            categories_created += 1
        self.db.flush()

        existing_codes = set(
            self.db.execute(
                select(Account.code).where(
                    Account.organization_id == organization_id
                )
            ).scalars().all()
        )
        accounts_created = 0
        accounts_skipped = 0
        for definition in chart_definition.ACCOUNTS:
            if definition.code in existing_codes:
                accounts_skipped += 1
                continue
            self.db.add(Account(
                organization_id=organization_id,
                category_id=categories[definition.category_key].id,
                code=definition.code,
                name=definition.name,
                description=definition.description,
                is_bank_account=definition.is_bank_account,
            ))
            accounts_created += 1
        self.db.flush()

        logger.info(
            "Chart initialized for organization %s: %d categories, "
            "%d accounts created, %d skipped",
            organization_id, categories_created,
            accounts_created, accounts_skipped,
        )
        return ChartInitializationResult(
            categories_created=categories_created,
            accounts_created=accounts_created,
            accounts_skipped=accounts_skipped,
        )

    def list_accounts(
        self, organization_id: int, include_inactive: bool = False
    ) -> list[Account]:
        self.get_organization(organization_id)
        query = select(Account).where(
            Account.organization_id == organization_id
        )
        if not include_inactive:
            query = query.where(Account.is_active.is_(True))
        return list(
            self.db.execute(query.order_by(Account.code)).scalars().all()
        )

    def get_account(self, organization_id: int, account_code: str) -> Account:
        account = self.db.execute(
            select(Account).where(
                Account.organization_id == organization_id,
                Account.code == account_code,
            )
        ).scalar_one_or_none()
        if not account:
            raise NotFoundError(account_not_found(account_code, organization_id))
        return account

    def deactivate_account(self, organization_id: int, account_code: str) -> Account:
        """
        Soft-deactivate an account.

        Accounts are never deleted: journal lines may reference them.
        Rules targeting an inactive account are skipped by the
        classifier. The designated bank account cannot be deactivated.
        """
        organization = self.get_organization(organization_id)
        account = self.get_account(organization_id, account_code)
        if account.code == organization.bank_account_code:
            raise ValidationError(
                f"Account {account.code} is the organization's bank "
                f"account and cannot be deactivated"
            )
        account.is_active = False
        self.db.flush()
        logger.info(
            "Deactivated account %s for organization %s",
            account_code, organization_id,
        )
        return account
