import logging

from fastapi import Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import BaseModel

from app.models.user import User
from app.services.users import get_user, get_user_by_email
from app.utils.security import SigningError, TokenConfig, decode_token, dummy_verify


logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/login")


class TokenResponse(BaseModel):
    """Signed access token returned to the client after signup or login."""
    access_token: str
    token_type: str = "bearer"


def issue_token(user: User, config: TokenConfig | None = None) -> TokenResponse:
    """Sign an access token for ``user``.

    A ``SigningError`` is surfaced as a 500: it means the deployment is
    missing its JWT secret, and retrying will not help.
    """
    try:
        return TokenResponse(access_token=user.get_jwt_token(config))
    except SigningError:
        logger.critical("Token signing is misconfigured", exc_info=True)
        raise HTTPException(status_code=500, detail="Authentication is not configured")


async def authenticate_user(email: str, password: str) -> User | None:
    """Return the user when ``password`` matches, otherwise ``None``.

    Unknown emails still spend a full bcrypt verify.
    """
    user = await run_in_threadpool(get_user_by_email, email, True)
    if user is None:
        await run_in_threadpool(dummy_verify)
        logger.info("Failed login for unknown email")
        return None
    if not await user.compare_password(password):
        logger.info("Failed login for user %s", user.pk)
        return None
    return user


def get_current_user(token: str = Depends(oauth2_scheme)) -> User:
    """Auth dependency that validates an access token and returns the user."""
    try:
        payload = decode_token(token)
        user_id: str = payload.get("sub")
        if user_id is None:
            raise HTTPException(status_code=401, detail="Could not validate credentials")
    except JWTError:
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    except SigningError:
        logger.critical("Token verification is misconfigured", exc_info=True)
        raise HTTPException(status_code=500, detail="Authentication is not configured")

    user = get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    return user
