# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Registration and login both end by issuing a bearer credential (see
credential_service.py). Passwords are hashed with bcrypt; the hash primitive
is only ever called through hash_password / verify_password.

SECURITY NOTES:
- bcrypt cost factor from BCRYPT_ROUNDS (default 12)
- Login failure never says whether the username or the password was wrong
- Deactivated accounts cannot log in
"""

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import AuthFailure, AuthFailureKind, ConflictFailure
from ..models import User
from ..extensions import db
from ..validation import MAX_BIGINT, FieldRule, PayloadPolicy, validate_payload
from .credential_service import CredentialCodec
from .persistence import transaction_scope
from .stats_service import record_account_created


INVALID_LOGIN = "Invalid credentials"


REGISTER_POLICY = PayloadPolicy(
    fields={
        "username": FieldRule("str", max_length=64),
        "name": FieldRule("str", max_length=120),
        "lastname": FieldRule("str", max_length=120),
        "phone": FieldRule("int", nullable=True, min_value=0, max_value=MAX_BIGINT),
        "email": FieldRule("str", max_length=255),
        "password": FieldRule("str", max_length=128),
    },
    required_on_create=frozenset({"username", "name", "lastname", "email", "password"}),
)


def hash_password(password: str) -> str:
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def register_user(payload: dict, codec: CredentialCodec) -> dict:
    """
    Create a user and hand back a credential for it.

    Raises:
        ValidationFailure: payload missing fields or malformed
        ConflictFailure: username already taken
    """
    cleaned = validate_payload(payload=payload, policy=REGISTER_POLICY, partial=False)
    password = cleaned.pop("password")

    with transaction_scope() as session:
        user = User(password_hash=hash_password(password), **cleaned)
        session.add(user)
        try:
            session.flush()
        except IntegrityError:
            raise ConflictFailure("Username already exists")
        record_account_created()

    return {
        "user_id": user.id,
        "username": user.username,
        "token": codec.issue(user.id, user.username),
        "message": "User registered successfully",
    }


def authenticate(username: str, password: str) -> User:
    """
    Look up and check credentials.

    Raises AuthFailure(INVALID) for an unknown user, an account without a
    password, a wrong password, or a deactivated account.
    """
    user = db.session.query(User).filter(User.username == username).first()
    if user is None or not user.password_hash:
        raise AuthFailure(AuthFailureKind.INVALID, INVALID_LOGIN)

    if not verify_password(password, user.password_hash):
        raise AuthFailure(AuthFailureKind.INVALID, INVALID_LOGIN)

    if not user.is_active:
        raise AuthFailure(AuthFailureKind.INVALID, INVALID_LOGIN)

    return user


def login(username, password, codec: CredentialCodec) -> dict:
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        raise AuthFailure(AuthFailureKind.INVALID, INVALID_LOGIN)

    user = authenticate(username, password)
    return {
        "token": codec.issue(user.id, user.username),
        "user_id": user.id,
        "username": user.username,
    }
