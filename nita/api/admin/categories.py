"""Admin category list for the service form."""

from fastapi import APIRouter, Request, status

from nita.api.deps import AdminUser, DbSession, client_ip
from nita.schemas.categories import CategoryCreate, CategoryOut
from nita.schemas.common import ErrorResponse, StatusMessage
from nita.services import audit
from nita.services import categories as category_service

router = APIRouter()


@router.get("", response_model=list[CategoryOut])
def list_categories(db: DbSession) -> list[CategoryOut]:
    return [CategoryOut.model_validate(c) for c in category_service.list_categories(db)]


@router.post(
    "",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
def create_category(
    body: CategoryCreate, request: Request, admin: AdminUser, db: DbSession
) -> CategoryOut:
    category = category_service.create_category(db, body.name)
    audit.record(
        db, admin, "create_category", f"Category: {category.name}", ip_address=client_ip(request)
    )
    db.commit()
    db.refresh(category)
    return CategoryOut.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=StatusMessage,
    responses={404: {"model": ErrorResponse}},
)
def delete_category(
    category_id: int, request: Request, admin: AdminUser, db: DbSession
) -> StatusMessage:
    category = category_service.delete_category(db, category_id)
    audit.record(
        db, admin, "delete_category", f"Category: {category.name}", ip_address=client_ip(request)
    )
    db.commit()
    return StatusMessage(message="Category deleted")
