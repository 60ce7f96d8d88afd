"""
Rule catalog: the single source of classification rules.

System rules are defined once in rule_definitions and persisted per
organization as SYSTEM rows. Users add their own rules as a
fallback tier. Ordering is the same everywhere:

1. SYSTEM tier before USER tier
2. Within a tier, higher priority first
3. Ties broken by definition order (system: catalog position,
   user: creation order)

The first matching rule wins.
"""

import logging
import re

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from bookkeeping.errors import (
    NotFoundError,
    ValidationError,
    organization_not_found,
    account_not_found,
    rule_not_found,
)
from bookkeeping.models.account import Account
from bookkeeping.models.enums import MatchType, RuleSource
from bookkeeping.models.mapping_rule import MappingRule
from bookkeeping.models.organization import Organization
from bookkeeping.rule_definitions import SYSTEM_RULES, RuleDefinition
from bookkeeping.schemas.rule import MappingRuleCreate, MappingRuleUpdate
from bookkeeping.services.audit import record_event

logger = logging.getLogger(__name__)


def normalize(text: str) -> str:
    return text.strip().upper()


def matches(description: str, match_type: MatchType, pattern: str) -> bool:
    """Compare a transaction description against one pattern."""
    text = normalize(description)
    if match_type == MatchType.REGEX:
        # Regex patterns keep their own case handling
        return re.search(pattern, text, re.IGNORECASE) is not None

    needle = normalize(pattern)
    if match_type == MatchType.EXACT:
        return text == needle
    if match_type == MatchType.STARTS_WITH:
        return text.startswith(needle)
    if match_type == MatchType.ENDS_WITH:
        return text.endswith(needle)
    return needle in text


class RuleCatalog:

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def definitions() -> list[RuleDefinition]:
        """System rule templates, highest priority first, stable."""
        return sorted(SYSTEM_RULES, key=lambda r: -r.priority)

    @staticmethod
    def match(description: str, rule: MappingRule | RuleDefinition) -> bool:
        return matches(description, rule.match_type, rule.pattern)

    def _tier(self, organization_id: int, source: RuleSource,
              active_only: bool = True) -> list[MappingRule]:
        query = select(MappingRule).where(
            MappingRule.organization_id == organization_id,
            MappingRule.source == source,
        )
        if active_only:
            query = query.where(MappingRule.is_active.is_(True))
        query = query.order_by(
            MappingRule.priority.desc(),
            MappingRule.sequence,
            MappingRule.id,
        )
        return list(self.db.execute(query).scalars().all())

    def system_rules(self, organization_id: int) -> list[MappingRule]:
        return self._tier(organization_id, RuleSource.SYSTEM)

    def custom_rules(
        self, organization_id: int, include_inactive: bool = False
    ) -> list[MappingRule]:
        return self._tier(
            organization_id, RuleSource.USER, active_only=not include_inactive
        )

    def rules(self, organization_id: int) -> list[MappingRule]:
        """Active rules in evaluation order: system tier, then user tier."""
        return self.system_rules(organization_id) + self.custom_rules(organization_id)

    def sync_system_rules(self, organization_id: int) -> int:
        """
        Regenerate the organization's SYSTEM rows from the definitions.

        Existing SYSTEM rows are deleted and recreated so the persisted
        tier always mirrors rule_definitions. USER rules are untouched.
        Returns the number of rules written.
        """
        if not self.db.get(Organization, organization_id):
            raise NotFoundError(organization_not_found(organization_id))

        self.db.execute(
            delete(MappingRule).where(
                MappingRule.organization_id == organization_id,
                MappingRule.source == RuleSource.SYSTEM,
            )
        )
        definitions = self.definitions()
        for sequence, definition in enumerate(definitions):
            self.db.add(MappingRule(
                organization_id=organization_id,
                name=definition.name,
                match_type=definition.match_type,
                pattern=definition.pattern,
                account_code=definition.account_code,
                priority=definition.priority,
                sequence=sequence,
                source=RuleSource.SYSTEM,
            ))
        self.db.flush()
        logger.info(
            "Synced %d system rules for organization %s",
            len(definitions), organization_id,
        )
        return len(definitions)

    # --- Custom rules ---

    def _require_account(self, organization_id: int, account_code: str) -> None:
        exists = self.db.execute(
            select(Account.id).where(
                Account.organization_id == organization_id,
                Account.code == account_code,
            )
        ).scalar_one_or_none()
        if exists is None:
            raise ValidationError(account_not_found(account_code, organization_id))

    def get_rule(self, organization_id: int, rule_id: int) -> MappingRule:
        rule = self.db.get(MappingRule, rule_id)
        if not rule or rule.organization_id != organization_id:
            raise NotFoundError(rule_not_found(rule_id))
        return rule

    def _get_custom_rule(self, organization_id: int, rule_id: int) -> MappingRule:
        rule = self.get_rule(organization_id, rule_id)
        if rule.source == RuleSource.SYSTEM:
            raise ValidationError(
                f"Mapping rule {rule_id} is a system rule and cannot be "
                f"changed; system rules are regenerated from the catalog"
            )
        return rule

    def create_custom_rule(
        self, organization_id: int, request: MappingRuleCreate
    ) -> MappingRule:
        if not self.db.get(Organization, organization_id):
            raise NotFoundError(organization_not_found(organization_id))
        self._require_account(organization_id, request.account_code)

        rule = MappingRule(
            organization_id=organization_id,
            name=request.name,
            match_type=request.match_type,
            pattern=request.pattern,
            account_code=request.account_code,
            priority=request.priority,
            source=RuleSource.USER,
        )
        self.db.add(rule)
        self.db.flush()
        record_event(
            self.db, organization_id, "RULE_CREATED",
            rule_id=rule.id, name=rule.name, pattern=rule.pattern,
            match_type=rule.match_type.value,
            account_code=rule.account_code, priority=rule.priority,
        )
        logger.info(
            "Created custom rule %s '%s' -> %s for organization %s",
            rule.id, rule.pattern, rule.account_code, organization_id,
        )
        return rule

    def update_custom_rule(
        self, organization_id: int, rule_id: int, request: MappingRuleUpdate
    ) -> MappingRule:
        rule = self._get_custom_rule(organization_id, rule_id)
        changes = {
            field: value
            for field, value in request.model_dump(exclude_unset=True).items()
            if value is not None
        }

        if "account_code" in changes:
            self._require_account(organization_id, changes["account_code"])
        match_type = changes.get("match_type", rule.match_type)
        pattern = changes.get("pattern", rule.pattern)
        if match_type == MatchType.REGEX:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValidationError(f"Invalid regular expression '{pattern}': {e}")

        for field, value in changes.items():
            setattr(rule, field, value)
        self.db.flush()
        record_event(
            self.db, organization_id, "RULE_UPDATED",
            rule_id=rule.id, changes=changes,
        )
        return rule

    def deactivate_custom_rule(self, organization_id: int, rule_id: int) -> MappingRule:
        rule = self._get_custom_rule(organization_id, rule_id)
        rule.is_active = False
        self.db.flush()
        record_event(
            self.db, organization_id, "RULE_DEACTIVATED", rule_id=rule.id,
        )
        return rule
