"""Administrative routes; every one requires the manage-system capability."""

from fastapi import APIRouter, Depends

from nita.api.admin import categories, logs, media, roles, services, users
from nita.api.deps import require_admin

router = APIRouter(dependencies=[Depends(require_admin)])
router.include_router(users.router, tags=["admin: users"])
router.include_router(roles.router, prefix="/roles", tags=["admin: roles"])
router.include_router(services.router, prefix="/services", tags=["admin: services"])
router.include_router(categories.router, prefix="/categories", tags=["admin: categories"])
router.include_router(media.router, prefix="/media", tags=["admin: media"])
router.include_router(logs.router, prefix="/logs", tags=["admin: logs"])
