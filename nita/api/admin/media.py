"""Admin icon upload, listing and deletion."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile

from nita.api.deps import AdminUser, DbSession, client_ip, get_icon_store
from nita.schemas.common import ErrorResponse, StatusMessage
from nita.schemas.media import IconUploadResponse
from nita.services import audit
from nita.services.media import IconStore

router = APIRouter()

Icons = Annotated[IconStore, Depends(get_icon_store)]


@router.post(
    "/upload",
    response_model=IconUploadResponse,
    responses={422: {"model": ErrorResponse}},
)
async def upload_icon(
    request: Request,
    admin: AdminUser,
    db: DbSession,
    icons: Icons,
    file: Annotated[UploadFile, File(description="png, jpg, jpeg or svg image")],
) -> IconUploadResponse:
    """Store an icon file; the returned file name can be used as a service icon."""
    # Read one byte past the limit so oversize files are rejected without reading them whole.
    content = await file.read(icons.max_bytes + 1)
    filename = icons.save(file.filename or "", content)
    audit.record(db, admin, "upload_icon", f"Icon: {filename}", ip_address=client_ip(request))
    db.commit()
    return IconUploadResponse(filename=filename)


@router.get("/icons", response_model=list[str])
def list_icons(icons: Icons) -> list[str]:
    return icons.names()


@router.delete(
    "/icons/{filename}",
    response_model=StatusMessage,
    responses={404: {"model": ErrorResponse}},
)
def delete_icon(
    filename: str, request: Request, admin: AdminUser, db: DbSession, icons: Icons
) -> StatusMessage:
    name = icons.delete(filename)
    audit.record(db, admin, "delete_icon", f"Icon: {name}", ip_address=client_ip(request))
    db.commit()
    return StatusMessage(message="Deleted")
