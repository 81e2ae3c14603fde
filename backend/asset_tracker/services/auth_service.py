# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every lifecycle record names the user who performed it. Uses bcrypt for
password hashing; token sessions are handled in session_service.py.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 6 characters required
- Inactive users cannot authenticate
"""

import bcrypt

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import User
from ..models.auth import USER_ROLES, ACCOUNT_STATUSES
from ..validation import EMAIL_RE
from asset_tracker.time_utils import utcnow

MIN_PASSWORD_LENGTH = 6


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _normalize_email(email: str | None) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("Valid email is required")
    return email


def create_user(
    name: str,
    email: str,
    password: str,
    role: str = "Employee",
    status: str = "active",
) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        ValidationError: bad name/email/role/status
        PasswordValidationError: password too short
        ConflictError: email already registered
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    email = _normalize_email(email)
    if role not in USER_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(USER_ROLES)}")
    if status not in ACCOUNT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ACCOUNT_STATUSES)}")

    existing = db.session.query(User).filter(User.email == email).first()
    if existing:
        raise ConflictError("email already exists")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
        status=status,
    )

    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid and the account is active, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    email = (email or "").strip().lower()
    user = db.session.query(User).filter(User.email == email).first()
    if not user or not user.is_active:
        return None

    if not verify_password(password or "", user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_profile(user_id: int, *, name: str | None = None, email: str | None = None) -> User:
    user = get_user(user_id)

    if name is not None:
        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be blank")
        user.name = name

    if email is not None:
        email = _normalize_email(email)
        clash = db.session.query(User).filter(User.email == email, User.id != user.id).first()
        if clash:
            raise ConflictError("email already exists")
        user.email = email

    db.session.commit()
    return user


def change_password(user_id: int, current_password: str, new_password: str) -> User:
    """
    Replace the password after re-checking the current one.

    Other sessions are revoked by the caller (session_service.revoke_all_user_sessions).
    """
    user = get_user(user_id)
    if not verify_password(current_password or "", user.password_hash):
        raise ValidationError("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    db.session.commit()
    return user
