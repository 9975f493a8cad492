"""
Authentication helpers: password hashing, JWT issue/verify, token
resolution for browser-facing endpoints and FastAPI dependencies.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from service_center.config import get_settings
from service_center.database import get_db
from service_center.exceptions import AuthenticationError
from service_center.models.user import User, UserRole

logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "jwt-token"
BEARER_PREFIX = "Bearer "

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed JWT whose ``sub`` is the user id."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict:
    """
    Verify a JWT and return its claims.

    Raises ``AuthenticationError`` for bad signatures, expired tokens and
    tokens without a subject.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token") from e

    if not claims.get("sub"):
        raise AuthenticationError("Token has no subject")
    return claims


async def get_user_from_token(db: AsyncSession, token: str) -> User:
    """Load the active user a token was issued for."""
    claims = decode_access_token(token)
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Invalid token subject") from e

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")
    return user


def resolve_token(
    request: Request,
    token_param: Optional[str] = None,
    auth_header: Optional[str] = None,
) -> Optional[str]:
    """
    Find the caller's token.

    Order: ``token`` query parameter (remembered in the session), then an
    ``Authorization: Bearer`` header, then the session. Returns ``None``
    when no source has one.
    """
    if token_param:
        logger.debug("Using token from parameter")
        request.session[SESSION_TOKEN_KEY] = token_param
        return token_param

    if auth_header and auth_header.startswith(BEARER_PREFIX):
        logger.debug("Using token from Authorization header")
        return auth_header[len(BEARER_PREFIX):]

    session_token = request.session.get(SESSION_TOKEN_KEY)
    if session_token:
        logger.debug("Using token from session")
        return session_token

    logger.warning("No valid token found from any source")
    return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Dependency for bearer-authenticated JSON endpoints."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await get_user_from_token(db, credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_roles(*roles: UserRole):
    """Dependency factory restricting an endpoint to the given roles."""

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return checker
