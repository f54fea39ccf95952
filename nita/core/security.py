"""Password hashing and opaque bearer token generation."""

import hashlib
import secrets

import bcrypt

from nita.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Length of the random secret stored (hashed) for directory shadow users.
SHADOW_PASSWORD_LEN = 32

# Verified against when a local username does not exist. Same cost as stored
# hashes, so unknown and known usernames take equally long to reject.
_DUMMY_HASH = bcrypt.hashpw(
    b"nita-dummy-password", bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
).decode("utf-8")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    if not hashed:
        bcrypt.checkpw(pw_bytes, _DUMMY_HASH.encode("utf-8"))
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def random_password_hash() -> str:
    """Hash of a random secret nobody knows; used for directory shadow users."""
    return hash_password(secrets.token_urlsafe(SHADOW_PASSWORD_LEN))


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a bearer token; the only form that is persisted."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_token(prefix: str | None = None) -> tuple[str, str]:
    """Return (plain token for the client, hash to persist)."""
    if prefix is None:
        prefix = settings.TOKEN_PREFIX
    full_token = f"{prefix}{secrets.token_urlsafe(40)}"
    return full_token, hash_token(full_token)
