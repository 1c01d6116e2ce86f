"""Signed-token authentication.

Tokens are HS256 JWTs whose ``sub`` claim is the user id. The user row is
looked up again on every request so role changes apply immediately; any
identity fields embedded in the token are ignored.
"""

from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.core.config import settings
from blogdesk.core.deps import get_db
from blogdesk.core.errors import AuthError
from blogdesk.models.user import User
from blogdesk.services.user import get_user_by_id

# auto_error=False: a missing header falls back to the session cookie
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str | None) -> dict:
    """Validate signature and expiry; raise ``AuthError`` with the reason."""
    if not token:
        raise AuthError("missing")
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise AuthError("expired") from exc
    except JWTError as exc:
        raise AuthError("invalid") from exc


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.auth_cookie_name)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency: resolve the User behind the bearer token or cookie."""
    payload = decode_access_token(_extract_token(request, credentials))

    try:
        user_id = int(payload["sub"])
    except (KeyError, ValueError, TypeError) as exc:
        raise AuthError("invalid") from exc

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise AuthError("invalid", "User not found, please login again")

    request.state.user_id = user.id
    return user
