"""
Audit trail helper.

Services call record_event() inside their own unit of work so the
audit row commits or rolls back together with the change it
describes.
"""

import json

from sqlalchemy.orm import Session

from bookkeeping.models.audit_log import AuditLog


def record_event(
    db: Session,
    organization_id: int | None,
    event_type: str,
    **details,
) -> AuditLog:
    entry = AuditLog(
        organization_id=organization_id,
        event_type=event_type,
        details=json.dumps(details, default=str, sort_keys=True),
    )
    db.add(entry)
    return entry
