# newsdesk/core/security.py
"""
Security module for authentication.
Handles password hashing, constant-time secret comparison and signing of
session tokens handed to clients.
"""
import hmac
import datetime as dt
import jwt  # PyJWT
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from newsdesk.config import settings

# Password hashing context
# Argon2 embeds a fresh random salt and its cost parameters in every hash
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# Session token configuration
SESSION_TOKEN_ALG = "HS256"  # Signing algorithm (HMAC SHA-256)

def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Stored form (digest, salt and parameters in one string)
    """
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Verify a plain text password against a stored hash.

    The digest comparison is constant-time. A malformed or unknown stored form
    is a data problem, not a login outcome, so it fails closed instead of
    raising to the caller.

    Returns:
        True if password matches, False otherwise
    """
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError, UnknownHashError):
        return False

def secrets_match(supplied: str | None, expected: str | None) -> bool:
    """Constant-time equality for shared secrets (e.g. the admin security key)."""
    if supplied is None or expected is None:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))

def create_session_token(session_id: str, expires_at: dt.datetime) -> str:
    """
    Sign a session id for the client.

    The token carries only the opaque session id and its expiry. Identity and
    role are always looked up server-side so that role changes and deletions
    apply on the next request.
    """
    payload = {
        "sid": session_id,
        "iat": dt.datetime.now(dt.timezone.utc),
        "exp": expires_at,
    }
    return jwt.encode(payload, settings.session_secret, algorithm=SESSION_TOKEN_ALG)

def decode_session_token(token: str) -> str | None:
    """
    Return the session id of a valid token, or None.

    Expired, tampered and malformed tokens all mean "no session".
    """
    try:
        payload = jwt.decode(token, settings.session_secret, algorithms=[SESSION_TOKEN_ALG])
    except jwt.InvalidTokenError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) and sid else None
