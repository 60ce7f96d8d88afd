"""
Pydantic schemas for mapping rules.

Only USER rules are created or changed through these schemas.
SYSTEM rules come from the rule catalog definitions.
"""

import re
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from bookkeeping.models.enums import MatchType, RuleSource


class MappingRuleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    match_type: MatchType = MatchType.CONTAINS
    pattern: str = Field(min_length=1, max_length=255)
    account_code: str = Field(min_length=1, max_length=20)
    priority: int = Field(default=50, ge=0, le=1000)

    @model_validator(mode="after")
    def regex_must_compile(self) -> "MappingRuleCreate":
        if self.match_type == MatchType.REGEX:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise ValueError(f"invalid regular expression: {e}")
        return self


class MappingRuleUpdate(BaseModel):
    """Partial update of a USER rule. Omitted fields stay unchanged."""
    name: str | None = Field(default=None, min_length=1, max_length=150)
    match_type: MatchType | None = None
    pattern: str | None = Field(default=None, min_length=1, max_length=255)
    account_code: str | None = Field(default=None, min_length=1, max_length=20)
    priority: int | None = Field(default=None, ge=0, le=1000)
    is_active: bool | None = None


class MappingRuleResponse(BaseModel):
    id: int
    name: str
    match_type: MatchType
    pattern: str
    account_code: str
    priority: int
    is_active: bool
    source: RuleSource
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
