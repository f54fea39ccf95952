"""Audit trail writer and paginated reader for administrative actions."""

import json
import math
from typing import Any

from sqlalchemy.orm import Session, selectinload

from nita.models import AuditLog, User

MAX_TARGET_LEN = 255


def record(
    db: Session,
    actor: User,
    action: str,
    target: str,
    details: dict[str, Any] | str | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """Add one audit entry to the session; committed with the caller's change."""
    if isinstance(details, dict):
        details = json.dumps(details, sort_keys=True, default=str)
    entry = AuditLog(
        user_id=actor.id,
        action=action,
        target=target[:MAX_TARGET_LEN],
        details=details,
        ip_address=ip_address,
    )
    db.add(entry)
    return entry


def paginate(db: Session, page: int, per_page: int) -> tuple[list[AuditLog], int, int]:
    """Return (entries, total, last_page) for a 1-based page, newest first."""
    total = db.query(AuditLog).count()
    last_page = max(1, math.ceil(total / per_page))
    entries = (
        db.query(AuditLog)
        .options(selectinload(AuditLog.user))
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return entries, total, last_page
