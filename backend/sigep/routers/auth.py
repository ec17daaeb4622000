"""Login boundary: the identity provider lives elsewhere; this issues and reads the session token.
POST /login is the local-development stand-in (ADMIN_USERNAME / ADMIN_PASSWORD)."""
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.auth import AuthenticatedUser, create_session_token, require_user
from sigep.config import settings
from sigep.database import get_db
from sigep import crud

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    username_ok = secrets.compare_digest(body.username.strip(), settings.admin_username)
    password_ok = secrets.compare_digest(body.password, settings.admin_password)
    if not (username_ok and password_ok):
        logger.warning("failed login for %r", body.username.strip())
        raise HTTPException(status_code=401, detail="Invalid username or password")
    user = await crud.upsert_user(db, user_id=settings.admin_username, first_name=settings.admin_username)
    token = create_session_token(user.id, email=user.email, name=user.first_name)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    logger.info("user %s logged in", user.id)
    return LoginResponse(access_token=token)


@router.post("/logout", status_code=204)
async def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name)


@router.get("/user", response_model=UserResponse)
async def current_user(
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    row = await crud.get_user(db, user.id)
    if row is None:
        first_name, _, last_name = (user.name or "").partition(" ")
        return UserResponse(id=user.id, email=user.email, first_name=first_name or None, last_name=last_name or None)
    return UserResponse.model_validate(row, from_attributes=True)
