"""
Authentication routes.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from service_center.auth import SESSION_TOKEN_KEY, create_access_token, get_current_user, verify_password
from service_center.database import get_db
from service_center.models.user import User
from service_center.schemas.user import LoginRequest, Token, User as UserSchema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Exchange email and password for a bearer token.

    The token and the user's name are also kept in the browser session so
    the server-rendered dashboard works without passing the token around.
    """
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning("Failed login attempt for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive user"
        )

    access_token = create_access_token(user)
    request.session[SESSION_TOKEN_KEY] = access_token
    request.session["firstName"] = user.first_name
    request.session["lastName"] = user.last_name
    logger.info("User %s logged in", user.id)

    return Token(access_token=access_token, user=UserSchema.model_validate(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(request: Request):
    """Forget the session token."""
    request.session.clear()
    return None


@router.get("/me", response_model=UserSchema)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Get the authenticated user."""
    return current_user
