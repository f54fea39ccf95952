"""Bulk-replace of many-to-many links (role<->service, user<->role, service<->role)."""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from nita.core.errors import ValidationFailed

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    attached: list[int] = field(default_factory=list)
    detached: list[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.attached or self.detached)


def load_targets(db: Session, model: Any, ids: list[int], field_name: str) -> list[Any]:
    """
    Fetch rows of model for ids, rejecting any id that does not exist.

    Duplicate ids are collapsed. Raises ValidationFailed with one message per
    offending array element (e.g. service_ids.2).
    """
    wanted = list(dict.fromkeys(ids))
    if not wanted:
        return []
    rows = db.query(model).filter(model.id.in_(wanted)).all()
    found = {row.id for row in rows}
    missing = [i for i in wanted if i not in found]
    if missing:
        errors = {
            f"{field_name}.{ids.index(i)}": [f"The selected {field_name} id {i} is invalid."]
            for i in missing
        }
        raise ValidationFailed(
            f"The selected {field_name} contain ids that do not exist: "
            + ", ".join(str(i) for i in missing),
            errors=errors,
        )
    by_id = {row.id: row for row in rows}
    return [by_id[i] for i in wanted]


def sync_links(
    db: Session,
    owner: Any,
    relationship: str,
    model: Any,
    ids: list[int],
    field_name: str,
) -> SyncResult:
    """
    Make owner.<relationship> contain exactly the rows with the given ids.

    Links outside the new set are removed, missing ones are added and existing
    ones are left untouched, so repeating the call is a no-op. Flushes but does
    not commit; the caller commits once together with its audit record.
    """
    targets = load_targets(db, model, ids, field_name)
    desired = {t.id for t in targets}
    collection = getattr(owner, relationship)
    current = {t.id for t in collection}

    result = SyncResult()
    for row in list(collection):
        if row.id not in desired:
            collection.remove(row)
            result.detached.append(row.id)
    for row in targets:
        if row.id not in current:
            collection.append(row)
            result.attached.append(row.id)
    db.flush()

    logger.info(
        "Synced %s.%s: attached=%s detached=%s",
        type(owner).__name__,
        relationship,
        result.attached,
        result.detached,
        extra={"owner_id": owner.id},
    )
    return result
