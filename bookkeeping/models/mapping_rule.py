"""
Mapping rule model.

A rule maps a description pattern to an account code. SYSTEM rules
are regenerated from the rule catalog definitions; USER rules are
created through the classification review flow and form a fallback
tier evaluated after the system tier.
"""

from datetime import datetime

from sqlalchemy import (
    String, Integer, Boolean, DateTime, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookkeeping.models.base import Base
from bookkeeping.models.enums import MatchType, RuleSource


class MappingRule(Base):
    __tablename__ = "mapping_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    match_type: Mapped[MatchType] = mapped_column(
        SAEnum(MatchType, name="match_type_enum"),
        nullable=False,
        default=MatchType.CONTAINS,
    )
    pattern: Mapped[str] = mapped_column(String(255), nullable=False)
    account_code: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    # Position within the catalog definitions; keeps ties between
    # equal-priority system rules in definition order.
    sequence: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    source: Mapped[RuleSource] = mapped_column(
        SAEnum(RuleSource, name="rule_source_enum"),
        nullable=False,
        default=RuleSource.USER,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    organization: Mapped["Organization"] = relationship(
        back_populates="mapping_rules"
    )

    def __repr__(self) -> str:
        return (
            f"<MappingRule {self.name} {self.match_type.value} "
            f"'{self.pattern}' -> {self.account_code} (p{self.priority})>"
        )
