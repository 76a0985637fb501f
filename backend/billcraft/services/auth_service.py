# Overview: Service-layer operations for auth; accounts, passwords and one-time codes.

"""
Authentication Service

Every account is a User; User.id is the owner of all billing data.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost from BCRYPT_LOG_ROUNDS)
- Minimum 6 characters
- One-time codes: 6 digits, bcrypt hashed, short-lived, at most 5
  verification attempts, single use
- Unknown emails get the same response as known ones when requesting a
  code (no account enumeration)
- Session tokens managed separately (see session_service.py)
"""
from __future__ import annotations

import re
import secrets
from datetime import timedelta

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import OneTimeCode, User
from ..validation import ConflictError, ValidationError
from billcraft.time_utils import utcnow

MIN_PASSWORD_LENGTH = 6
ONE_TIME_CODE_DIGITS = 6
ONE_TIME_CODE_MAX_ATTEMPTS = 5

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet requirements."""
    pass


def normalize_email(email: str | None) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("A valid email is required")
    return email


def validate_password_strength(password: str | None) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


def _rounds() -> int:
    return int(current_app.config.get("BCRYPT_LOG_ROUNDS", 12))


def hash_password(password: str) -> str:
    """Validate then bcrypt-hash a password."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=_rounds())
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check; malformed hashes simply fail."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter_by(email=email).first()


def sign_up(email: str, password: str) -> User:
    """
    Create a new account.

    Raises:
        ValidationError: bad email
        PasswordValidationError: password too short
        ConflictError: email already registered
    """
    email = normalize_email(email)
    password_hash = hash_password(password)

    if get_user_by_email(email) is not None:
        raise ConflictError("An account with this email already exists")

    user = User(email=email, password_hash=password_hash, is_active=True)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("An account with this email already exists")
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Returns the User if the credentials are valid, None otherwise.
    Updates last_login_at on success.
    """
    try:
        email = normalize_email(email)
    except ValidationError:
        return None

    user = db.session.query(User).filter(User.email == email, User.is_active.is_(True)).first()
    if not user:
        return None

    if verify_password(password or "", user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None


def set_password(user_id: int, new_password: str, *, keep_session_id: int | None = None) -> User:
    """
    Replace a user's password and revoke their other sessions.
    """
    from .session_service import revoke_all_user_sessions

    user = db.session.query(User).filter_by(id=user_id).first()
    if not user:
        raise ValueError("User not found")

    user.password_hash = hash_password(new_password)
    db.session.commit()

    revoke_all_user_sessions(user.id, reason="Password changed", except_session_id=keep_session_id)
    return user


# --- One-time codes ----------------------------------------------------------

def _generate_code() -> str:
    return f"{secrets.randbelow(10 ** ONE_TIME_CODE_DIGITS):0{ONE_TIME_CODE_DIGITS}d}"


def request_one_time_code(email: str) -> str | None:
    """
    Issue a sign-in code for the email.

    Returns the plaintext code when the account exists, None otherwise;
    callers must answer identically in both cases. Earlier unconsumed
    codes for the same email are invalidated.
    """
    email = normalize_email(email)
    user = get_user_by_email(email)
    if user is None or not user.is_active:
        current_app.logger.info("One-time code requested for unknown email")
        return None

    now = utcnow()
    db.session.query(OneTimeCode).filter(
        OneTimeCode.email == email,
        OneTimeCode.consumed_at.is_(None),
    ).update({"consumed_at": now})

    code = _generate_code()
    ttl = timedelta(minutes=int(current_app.config.get("ONE_TIME_CODE_TTL_MINUTES", 10)))
    db.session.add(OneTimeCode(
        email=email,
        code_hash=bcrypt.hashpw(code.encode("utf-8"), bcrypt.gensalt(rounds=_rounds())).decode("utf-8"),
        created_at=now,
        expires_at=now + ttl,
        attempts=0,
    ))
    db.session.commit()

    # Development delivery channel
    current_app.logger.info("One-time code for %s: %s", email, code)
    return code


def verify_one_time_code(email: str, code: str) -> User | None:
    """
    Consume a valid code and return its user, or None.

    Each call counts one attempt against the latest open code; after
    ONE_TIME_CODE_MAX_ATTEMPTS failures the code is burned.
    """
    try:
        email = normalize_email(email)
    except ValidationError:
        return None

    now = utcnow()
    otc = (
        db.session.query(OneTimeCode)
        .filter(OneTimeCode.email == email, OneTimeCode.consumed_at.is_(None))
        .order_by(OneTimeCode.created_at.desc(), OneTimeCode.id.desc())
        .first()
    )
    if otc is None or otc.expires_at < now:
        return None

    otc.attempts = (otc.attempts or 0) + 1
    matched = bool(code) and verify_password(str(code).strip(), otc.code_hash)

    if matched:
        otc.consumed_at = now
    elif otc.attempts >= ONE_TIME_CODE_MAX_ATTEMPTS:
        otc.consumed_at = now
    db.session.commit()

    if not matched:
        return None

    user = get_user_by_email(email)
    if not user or not user.is_active:
        return None
    user.last_login_at = now
    db.session.commit()
    return user
