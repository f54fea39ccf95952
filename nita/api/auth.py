"""Login, current-user, password change and logout endpoints."""

from fastapi import APIRouter

from nita.api.deps import AppSettings, CurrentUser, DbSession, Directories
from nita.schemas.auth import (
    Capabilities,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
)
from nita.schemas.common import ErrorResponse, StatusMessage, UserOut
from nita.services import auth as auth_service
from nita.services import gate

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def login(
    body: LoginRequest,
    db: DbSession,
    directories: Directories,
    settings: AppSettings,
) -> LoginResponse:
    """
    Authenticate against the local user table (type "0"), OpenLDAP ("1") or
    FreeIPA ("2"). Any previous token of the user is revoked; the new one goes
    in the Authorization header as: Bearer <token>
    """
    credential = auth_service.credential_from_request(body.username, body.password, body.type)
    result = auth_service.login(db, credential, directories, settings)
    return LoginResponse(token=result.token, user=UserOut.model_validate(result.user))


@router.get("/me", response_model=MeResponse)
def me(user: CurrentUser) -> MeResponse:
    """Current user with roles and the capabilities the client may render."""
    return MeResponse(
        user=UserOut.model_validate(user),
        capabilities=Capabilities(admin=gate.is_admin(user)),
    )


@router.post(
    "/change-password",
    response_model=StatusMessage,
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser,
    db: DbSession,
) -> StatusMessage:
    auth_service.change_password(
        db,
        user,
        current_password=body.current_password,
        new_password=body.new_password,
        confirmation=body.new_password_confirmation,
    )
    return StatusMessage(message="Password changed successfully.")


@router.post("/logout", response_model=StatusMessage)
def logout(user: CurrentUser, db: DbSession) -> StatusMessage:
    """Revoke every token of the caller."""
    auth_service.revoke_sessions(db, user)
    return StatusMessage(message="Logged out.")
