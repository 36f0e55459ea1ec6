"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from domeal.api.dependencies import SESSION_COOKIE_NAME, get_current_user
from domeal.config import get_settings
from domeal.database import get_db
from domeal.errors import ConfigError, ValidationError
from domeal.models.user import User
from domeal.schemas.auth import UserResponse
from domeal.services.auth import delete_session, login_line_user
from domeal.services.line_login import LineLoginClient, decode_id_token, get_line_login_client

router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/line-callback")
async def line_callback(
    db: Annotated[Session, Depends(get_db)],
    line_client: Annotated[LineLoginClient, Depends(get_line_login_client)],
    code: str | None = None,
):
    """Complete LINE login: exchange the code, persist the user, set the session cookie."""
    if not code:
        raise ValidationError("Missing code")

    settings = get_settings()
    if not settings.login_redirect_url:
        raise ConfigError("LOGIN_REDIRECT_URL is not set")

    tokens = await line_client.exchange_code(code)
    claims = decode_id_token(tokens.id_token)
    session_token = login_line_user(db, claims, tokens.access_token, tokens.refresh_token)

    response = RedirectResponse(
        url=settings.login_redirect_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT
    )
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_token,
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.post("/logout")
def logout(
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    session_id: Annotated[str | None, Cookie()] = None,
):
    """Logout: drop the session and clear its cookie."""
    delete_session(db, session_id)
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"message": "Logged out successfully"}
