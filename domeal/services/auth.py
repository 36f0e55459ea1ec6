"""Session authentication and LINE login persistence."""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domeal.config import get_settings
from domeal.errors import PersistenceError, Unauthorized
from domeal.models.user import User, UserSession, UserToken

logger = logging.getLogger(__name__)

SESSION_TOKEN_BYTES = 16


def generate_session_token() -> str:
    """Create a random hex session token."""
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def authenticate_session(db: Session, session_token: str | None) -> User:
    """Resolve a session token to its user and slide the inactivity window.

    Raises ``Unauthorized`` when the token is missing, unknown, or has not
    been used within ``session_max_age_days``.
    """
    if not session_token:
        raise Unauthorized("Unauthorized: missing session")

    session = (
        db.query(UserSession).filter(UserSession.session_token == session_token).first()
    )
    if session is None:
        raise Unauthorized("Unauthorized: invalid session")

    now = datetime.now(UTC)
    max_age = timedelta(days=get_settings().session_max_age_days)
    if now - _as_utc(session.last_used_at) > max_age:
        raise Unauthorized("Unauthorized: session expired")

    session.last_used_at = now
    try:
        db.commit()
    except SQLAlchemyError as e:
        # The identity is still valid; only the sliding window failed to move
        db.rollback()
        logger.warning(f"Failed to refresh session last_used_at: {e}")

    user = session.user
    logger.info(f"User {user.id} authenticated")
    return user


def get_user_by_line_sub(db: Session, line_sub: str) -> User | None:
    """Get a user by LINE subject identifier."""
    return db.query(User).filter(User.line_sub == line_sub).first()


def login_line_user(
    db: Session,
    claims: dict,
    access_token: str,
    refresh_token: str | None,
) -> str:
    """Create or refresh a user from LINE ID-token claims and return a new session token.

    New users get a user row, a token row and a session in one transaction.
    Returning users have their session token rotated and token pair replaced.
    """
    line_sub = claims["sub"]
    session_token = generate_session_token()
    now = datetime.now(UTC)

    try:
        user = get_user_by_line_sub(db, line_sub)
        if user is None:
            logger.info("LINE user not registered yet, creating account")
            user = User(
                line_sub=line_sub,
                display_name=claims.get("name") or "",
                picture_url=claims.get("picture"),
            )
            db.add(user)
            db.flush()
            db.add(
                UserToken(
                    user_id=user.id,
                    access_token=access_token,
                    refresh_token=refresh_token,
                )
            )
            db.add(UserSession(user_id=user.id, session_token=session_token, last_used_at=now))
        else:
            logger.info(f"LINE user {user.id} already registered, rotating session")
            if claims.get("name"):
                user.display_name = claims["name"]
            if claims.get("picture"):
                user.picture_url = claims["picture"]

            session = db.query(UserSession).filter(UserSession.user_id == user.id).first()
            if session is None:
                db.add(UserSession(user_id=user.id, session_token=session_token, last_used_at=now))
            else:
                session.session_token = session_token
                session.last_used_at = now

            if user.token is None:
                db.add(
                    UserToken(
                        user_id=user.id,
                        access_token=access_token,
                        refresh_token=refresh_token,
                    )
                )
            else:
                user.token.access_token = access_token
                user.token.refresh_token = refresh_token

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to persist LINE login: {e}")
        raise PersistenceError("Failed to save login") from e

    return session_token


def delete_session(db: Session, session_token: str) -> None:
    """Delete a session so its cookie stops authenticating."""
    try:
        db.query(UserSession).filter(UserSession.session_token == session_token).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to delete session") from e
