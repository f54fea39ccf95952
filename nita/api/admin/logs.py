"""Admin audit log listing."""

from typing import Annotated

from fastapi import APIRouter, Query

from nita.api.deps import AppSettings, DbSession
from nita.schemas.audit import AuditLogOut, AuditLogPage
from nita.services import audit

router = APIRouter()


@router.get("", response_model=AuditLogPage)
def list_logs(
    db: DbSession,
    settings: AppSettings,
    page: Annotated[int, Query(ge=1)] = 1,
) -> AuditLogPage:
    """Administrative actions, newest first, AUDIT_LOG_PAGE_SIZE per page."""
    per_page = settings.AUDIT_LOG_PAGE_SIZE
    entries, total, last_page = audit.paginate(db, page, per_page)
    return AuditLogPage(
        data=[AuditLogOut.model_validate(e) for e in entries],
        current_page=page,
        per_page=per_page,
        total=total,
        last_page=last_page,
    )
