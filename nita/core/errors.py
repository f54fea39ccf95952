"""Domain errors raised by services and rendered by the API as JSON error bodies."""


class NitaError(Exception):
    """Base error; status_code and message are rendered as {status, message}."""

    status_code = 500

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None) -> None:
        self.message = message
        self.errors = errors
        super().__init__(message)


class ValidationFailed(NitaError):
    """Malformed or missing input (422), optionally with per-field messages."""

    status_code = 422

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls(message, errors={field: [message]})


class InvalidCredentials(NitaError):
    """Wrong username or password; never says which."""

    status_code = 401


class AuthSystemError(NitaError):
    """Directory connectivity or protocol fault."""

    status_code = 500

    def __init__(self, message: str, debug: str | None = None) -> None:
        self.debug = debug
        super().__init__(message)


class Forbidden(NitaError):
    """Gate denial for an authenticated caller."""

    status_code = 403

    def __init__(self, capability: str, message: str | None = None) -> None:
        self.capability = capability
        super().__init__(message or f"This action requires the [{capability}] capability.")


class ProtectedResource(NitaError):
    """Attempt to rename or delete the protected admin role."""

    status_code = 403


class NotFound(NitaError):
    status_code = 404


class Conflict(NitaError):
    """Unique constraint violation; names the conflicting field."""

    status_code = 409

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message, errors={field: [message]})
