from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi.concurrency import run_in_threadpool
from jose import JOSEError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from app.utils.config import Settings, settings


BCRYPT_ROUNDS = 12
# bcrypt ignores everything past this many bytes of the secret
BCRYPT_MAX_BYTES = 72

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


class HashingError(RuntimeError):
    """The bcrypt primitive failed; nothing may be persisted."""


class SigningError(RuntimeError):
    """Token signing is misconfigured. Not retryable."""


class TokenConfig(BaseModel):
    """Signing secret, algorithm and lifetime used to issue access tokens."""
    secret_key: str | None
    algorithm: str = "HS256"
    expires_in: timedelta = timedelta(days=1)

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "TokenConfig":
        source = source or settings
        return cls(
            secret_key=source.jwt_secret,
            algorithm=source.jwt_algorithm,
            expires_in=source.jwt_expire,
        )


def hash_password(plain: str) -> str:
    """Hash a plaintext secret using bcrypt."""
    if not isinstance(plain, str) or not plain:
        raise HashingError("Cannot hash an empty secret")
    try:
        return pwd_context.hash(plain)
    except (ValueError, TypeError, MemoryError) as exc:
        raise HashingError("Password hashing failed") from exc


def verify_password(plain: str, hashed: str) -> bool:
    """Verify plaintext against a bcrypt hash in constant time."""
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError) as exc:
        raise HashingError("Stored hash could not be verified") from exc


async def averify_password(plain: str, hashed: str) -> bool:
    return await run_in_threadpool(verify_password, plain, hashed)


def dummy_verify() -> None:
    """Spend the same time as a real verify when no user was found."""
    pwd_context.dummy_verify()


def create_token(subject: str, config: TokenConfig | None = None) -> str:
    """Create a signed JWT carrying the subject (as ``sub`` and ``id``), issue time and expiration."""
    config = config or TokenConfig.from_settings()
    if not config.secret_key:
        raise SigningError("JWT secret is not configured")

    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "id": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + config.expires_in).timestamp()),
    }
    try:
        return jwt.encode(payload, config.secret_key, algorithm=config.algorithm)
    except JOSEError as exc:
        raise SigningError(f"Could not sign token with algorithm {config.algorithm!r}") from exc


def decode_token(token: str, config: TokenConfig | None = None) -> dict[str, Any]:
    """Decode and verify a JWT. Raises ``jose.JWTError`` when invalid or expired."""
    config = config or TokenConfig.from_settings()
    if not config.secret_key:
        raise SigningError("JWT secret is not configured")
    return jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
