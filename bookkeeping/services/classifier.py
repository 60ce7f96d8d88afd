"""
Classifier: assigns an account code to each bank transaction.

classify() is pure: it reads rules and accounts but writes nothing.
The same transaction against the same rules and chart always gets
the same answer. A transaction no rule matches stays unclassified;
that is a valid outcome, not an error.

A rule whose target account is missing or inactive is skipped and
the scan continues with the next rule.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, delete, func
from sqlalchemy.orm import Session

from bookkeeping.errors import (
    ValidationError,
    account_not_found,
)
from bookkeeping.models.account import Account
from bookkeeping.models.bank_transaction import BankTransaction
from bookkeeping.models.enums import ClassificationSource, RuleSource
from bookkeeping.models.journal_entry import JournalEntry, JournalEntryLine
from bookkeeping.models.mapping_rule import MappingRule
from bookkeeping.schemas.transaction import (
    ClassificationRunResult,
    ClassificationSummary,
    AccountClassificationCount,
)
from bookkeeping.services.audit import record_event
from bookkeeping.services.period_service import PeriodService
from bookkeeping.services.rule_catalog import RuleCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    account_code: str
    rule_id: int
    rule_name: str
    source: RuleSource


class Classifier:

    def __init__(self, db: Session):
        self.db = db
        self.catalog = RuleCatalog(db)
        self.periods = PeriodService(db)

    def _snapshot(self, organization_id: int) -> tuple[list[MappingRule], set[str]]:
        """Current rules in evaluation order and the active account codes."""
        rules = self.catalog.rules(organization_id)
        active_codes = set(
            self.db.execute(
                select(Account.code).where(
                    Account.organization_id == organization_id,
                    Account.is_active.is_(True),
                )
            ).scalars().all()
        )
        return rules, active_codes

    # --- Rule evaluation ---
    # Rules arrive in evaluation order: the system tier, then the
    # user tier. The first rule whose pattern matches and whose
    # target account is active wins.
    def _first_match(
        self,
        transaction: BankTransaction,
        rules: list[MappingRule],
        active_codes: set[str],
    ) -> ClassificationResult | None:
        for rule in rules:
            if not self.catalog.match(transaction.description, rule):
                continue
            if rule.account_code not in active_codes:
                logger.warning(
                    "Rule '%s' matched transaction %s but target account "
                    "%s is missing or inactive; skipping",
                    rule.name, transaction.id, rule.account_code,
                )
                continue
            return ClassificationResult(
                account_code=rule.account_code,
                rule_id=rule.id,
                rule_name=rule.name,
                source=rule.source,
            )
        return None

    def classify(self, transaction: BankTransaction) -> ClassificationResult | None:
        """
        Return the first rule match with a usable target, or None.

        Rules and chart are read on every call, so the answer always
        reflects the rule set and chart as they are now.
        """
        rules, active_codes = self._snapshot(transaction.organization_id)
        return self._first_match(transaction, rules, active_codes)

    def auto_classify_period(
        self,
        organization_id: int,
        period_id: int,
        reclassify: bool = False,
    ) -> ClassificationRunResult:
        """
        Classify the period's transactions by rule.

        By default only unclassified transactions are examined. With
        reclassify=True every rule-classified transaction is run
        through the rules again as well. MANUAL classifications are
        never touched. The whole run classifies against one read of
        the rules and chart.
        """
        period = self.periods.get_period(organization_id, period_id)
        self.periods.require_open(period, "Auto-classification")
        rules, active_codes = self._snapshot(organization_id)

        query = select(BankTransaction).where(
            BankTransaction.organization_id == organization_id,
            BankTransaction.fiscal_period_id == period_id,
        )
        if reclassify:
            query = query.where(
                (BankTransaction.classification_source.is_(None))
                | (BankTransaction.classification_source == ClassificationSource.RULE)
            )
        else:
            query = query.where(BankTransaction.account_code.is_(None))
        transactions = self.db.execute(
            query.order_by(BankTransaction.transaction_date, BankTransaction.id)
        ).scalars().all()

        now = datetime.utcnow()
        classified = 0
        for txn in transactions:
            result = self._first_match(txn, rules, active_codes)
            if result is None:
                txn.account_code = None
                txn.classification_source = None
                txn.classified_by = None
                txn.classified_at = None
                continue
            txn.account_code = result.account_code
            txn.classification_source = ClassificationSource.RULE
            txn.classified_by = result.rule_name
            txn.classified_at = now
            classified += 1
        self.db.flush()

        outcome = ClassificationRunResult(
            examined=len(transactions),
            classified=classified,
            unclassified=len(transactions) - classified,
        )
        logger.info(
            "Auto-classified period %s for organization %s: %d examined, "
            "%d classified, %d unclassified",
            period_id, organization_id,
            outcome.examined, outcome.classified, outcome.unclassified,
        )
        return outcome

    def classify_manually(
        self,
        organization_id: int,
        transaction_id: int,
        account_code: str,
        user: str,
    ) -> BankTransaction:
        """
        Override a transaction's classification by hand.

        The period must be OPEN; a PROCESSED period is overridden
        through Reprocessor.classify_manually. The target account must
        exist and be active. Any journal entry already generated from
        the transaction is removed so the next generation run posts it
        to the new account.
        """
        txn = self.periods.get_transaction(organization_id, transaction_id)
        period = self.periods.get_period(organization_id, txn.fiscal_period_id)
        self.periods.require_open(period, "Manual classification")

        account = self.db.execute(
            select(Account).where(
                Account.organization_id == organization_id,
                Account.code == account_code,
            )
        ).scalar_one_or_none()
        if not account:
            raise ValidationError(account_not_found(account_code, organization_id))
        if not account.is_active:
            raise ValidationError(f"Account {account_code} is not active")

        previous = txn.account_code
        stale_entry_ids = self.db.execute(
            select(JournalEntryLine.journal_entry_id).where(
                JournalEntryLine.source_transaction_id == txn.id
            )
        ).scalars().all()
        if stale_entry_ids:
            self.db.execute(
                delete(JournalEntryLine).where(
                    JournalEntryLine.journal_entry_id.in_(stale_entry_ids)
                )
            )
            self.db.execute(
                delete(JournalEntry).where(JournalEntry.id.in_(stale_entry_ids))
            )

        txn.account_code = account_code
        txn.classification_source = ClassificationSource.MANUAL
        txn.classified_by = f"manual:{user}"
        txn.classified_at = datetime.utcnow()
        self.db.flush()

        record_event(
            self.db, organization_id, "MANUAL_CLASSIFICATION",
            transaction_id=txn.id,
            previous_account_code=previous,
            account_code=account_code,
            user=user,
            removed_journal_entries=len(set(stale_entry_ids)),
        )
        logger.info(
            "Transaction %s manually classified %s -> %s by %s",
            txn.id, previous, account_code, user,
        )
        return txn

    def summary(self, organization_id: int, period_id: int) -> ClassificationSummary:
        self.periods.get_period(organization_id, period_id)
        scope = (
            BankTransaction.organization_id == organization_id,
            BankTransaction.fiscal_period_id == period_id,
        )

        total = self.db.execute(
            select(func.count(BankTransaction.id)).where(*scope)
        ).scalar()
        manual = self.db.execute(
            select(func.count(BankTransaction.id)).where(
                *scope,
                BankTransaction.classification_source == ClassificationSource.MANUAL,
            )
        ).scalar()
        per_account = self.db.execute(
            select(BankTransaction.account_code, func.count(BankTransaction.id))
            .where(*scope, BankTransaction.account_code.is_not(None))
            .group_by(BankTransaction.account_code)
            .order_by(BankTransaction.account_code)
        ).all()

        classified = sum(count for _, count in per_account)
        return ClassificationSummary(
            total=total,
            classified=classified,
            unclassified=total - classified,
            manual=manual,
            by_account=[
                AccountClassificationCount(account_code=code, count=count)
                for code, count in per_account
            ],
        )
