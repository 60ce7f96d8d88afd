"""
Mapping rule endpoints.

System rules are read-only here; they are regenerated from the
catalog with the sync endpoint.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookkeeping.api.errors import http_error
from bookkeeping.models.base import get_db
from bookkeeping.services.rule_catalog import RuleCatalog
from bookkeeping.schemas.rule import (
    MappingRuleCreate,
    MappingRuleUpdate,
    MappingRuleResponse,
)

router = APIRouter(
    prefix="/organizations/{organization_id}/rules",
    tags=["Rules"],
)


@router.get("", response_model=list[MappingRuleResponse])
def list_rules(
    organization_id: int,
    db: Session = Depends(get_db),
):
    """Active rules in evaluation order."""
    return RuleCatalog(db).rules(organization_id)


@router.post("", response_model=MappingRuleResponse, status_code=201)
def create_rule(
    organization_id: int,
    request: MappingRuleCreate,
    db: Session = Depends(get_db),
):
    catalog = RuleCatalog(db)
    try:
        rule = catalog.create_custom_rule(organization_id, request)
        db.commit()
        return rule
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.patch("/{rule_id}", response_model=MappingRuleResponse)
def update_rule(
    organization_id: int,
    rule_id: int,
    request: MappingRuleUpdate,
    db: Session = Depends(get_db),
):
    catalog = RuleCatalog(db)
    try:
        rule = catalog.update_custom_rule(organization_id, rule_id, request)
        db.commit()
        return rule
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.post("/{rule_id}/deactivate", response_model=MappingRuleResponse)
def deactivate_rule(
    organization_id: int,
    rule_id: int,
    db: Session = Depends(get_db),
):
    catalog = RuleCatalog(db)
    try:
        rule = catalog.deactivate_custom_rule(organization_id, rule_id)
        db.commit()
        return rule
    except ValueError as e:
        db.rollback()
        raise http_error(e)


@router.post("/sync")
def sync_system_rules(
    organization_id: int,
    db: Session = Depends(get_db),
):
    """Regenerate the organization's system rules from the catalog."""
    catalog = RuleCatalog(db)
    try:
        count = catalog.sync_system_rules(organization_id)
        db.commit()
        return {"organization_id": organization_id, "system_rules": count}
    except ValueError as e:
        db.rollback()
        raise http_error(e)
