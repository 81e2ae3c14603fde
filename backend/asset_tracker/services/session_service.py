# Overview: Service-layer operations for bearer sessions; issue, check and revoke login tokens.

"""
Bearer sessions for the asset API.

A login hands the client a random hex token once; only its SHA-256 digest
is kept in session_tokens. Every performer id written to asset history
comes from the user resolved here.

LIMITS:
- SESSION_ABSOLUTE_TIMEOUT: a token dies 24h after login whatever happens
- SESSION_IDLE_TIMEOUT: 2h without a request revokes it
- logout, password change and account deactivation revoke it as well
"""

import hashlib
import secrets
from datetime import timedelta

from ..extensions import db
from ..errors import NotFoundError, AuthenticationError
from ..models import SessionToken, User
from asset_tracker.time_utils import utcnow


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)


def generate_token() -> str:
    """64 hex chars; returned to the client and never persisted."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    # Tokens carry 256 bits of entropy; no salt or slow hash needed
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _active_by_token(token: str) -> SessionToken | None:
    return (
        db.session.query(SessionToken)
        .filter(SessionToken.token_hash == hash_token(token), SessionToken.is_revoked.is_(False))
        .first()
    )


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Open a session for an active user.

    Returns (row, token). The caller passes the token on; it cannot be
    recovered from the row later.
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is inactive")

    token = generate_token()
    opened_at = utcnow()

    row = SessionToken(
        user_id=user.id,
        token_hash=hash_token(token),
        created_at=opened_at,
        last_used_at=opened_at,
        expires_at=opened_at + SESSION_ABSOLUTE_TIMEOUT,
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(row)
    db.session.commit()
    return row, token


def _mark_revoked(row: SessionToken, reason: str, at=None) -> None:
    row.is_revoked = True
    row.revoked_at = at or utcnow()
    row.revoked_reason = reason


def validate_session(token: str) -> User | None:
    """
    Resolve a bearer token to its user, or None.

    Idle sessions and sessions of deactivated users are revoked on the
    spot. A successful check refreshes last_used_at.
    """
    row = _active_by_token(token)
    if row is None:
        return None

    now = utcnow()
    if now > row.expires_at:
        return None

    if now - row.last_used_at > SESSION_IDLE_TIMEOUT:
        _mark_revoked(row, "Idle timeout", now)
        db.session.commit()
        return None

    user = db.session.get(User, row.user_id)
    if user is None or not user.is_active:
        _mark_revoked(row, "User account inactive", now)
        db.session.commit()
        return None

    row.last_used_at = now
    db.session.commit()
    return user


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """False when the token is unknown or already revoked."""
    row = _active_by_token(token)
    if row is None:
        return False
    _mark_revoked(row, reason)
    db.session.commit()
    return True


def revoke_all_user_sessions(user_id: int, reason: str = "Revoke all sessions", *, keep_token: str | None = None) -> int:
    """
    Revoke every open session of a user except, optionally, `keep_token`.

    Returns the number revoked.
    """
    query = db.session.query(SessionToken).filter(
        SessionToken.user_id == user_id,
        SessionToken.is_revoked.is_(False),
    )
    if keep_token:
        query = query.filter(SessionToken.token_hash != hash_token(keep_token))

    now = utcnow()
    rows = query.all()
    for row in rows:
        _mark_revoked(row, reason, now)
    db.session.commit()
    return len(rows)


def cleanup_expired_sessions(older_than_days: int = 30) -> int:
    """Purge dead (expired or revoked) sessions opened before the cutoff. Returns rows deleted."""
    now = utcnow()
    cutoff = now - timedelta(days=older_than_days)

    removed = (
        db.session.query(SessionToken)
        .filter(
            db.or_(SessionToken.expires_at < now, SessionToken.is_revoked.is_(True)),
            SessionToken.created_at < cutoff,
        )
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return removed
