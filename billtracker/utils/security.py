"""Security helpers: password hashing, JWT issue/verify, sanitizing and
HMAC-signed data envelopes."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
from datetime import timedelta
from typing import Any, Optional

import bcrypt
from flask_jwt_extended import create_access_token, decode_token, get_jwt_identity
from jwt.exceptions import PyJWTError
from flask_jwt_extended.exceptions import JWTExtendedException

from .logging_utils import get_logger

logger = get_logger("security")

BCRYPT_ROUNDS = 10

_ESCAPES = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(pw_hash: str, password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), pw_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_token(user, expires: Optional[timedelta] = None) -> str:
    """Issue an HS256 access token; ``sub`` is the user id."""
    claims = {"email": user.email, "name": user.name}
    kwargs: dict[str, Any] = {"identity": user.id, "additional_claims": claims}
    if expires is not None:
        kwargs["expires_delta"] = expires
    return create_access_token(**kwargs)


def verify_token(token: str) -> Optional[dict[str, Any]]:
    """Decode a token outside of a request; None when invalid or expired."""
    try:
        return decode_token(token)
    except (PyJWTError, JWTExtendedException) as e:
        logger.info("JWT verification failed: %s", e)
        return None


def current_user_id() -> Optional[str]:
    identity = get_jwt_identity()
    return str(identity) if identity else None


def sanitize_input(value: Any) -> Any:
    """Escape HTML-significant characters in strings, recursing into lists and dicts."""
    if isinstance(value, str):
        for char, entity in _ESCAPES:
            value = value.replace(char, entity)
        return value
    if isinstance(value, list):
        return [sanitize_input(v) for v in value]
    if isinstance(value, dict):
        return {k: sanitize_input(v) for k, v in value.items()}
    return value


def _signature(data: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), data.encode("utf-8"), hashlib.sha256).digest()


def sign_data(data: str, secret: str) -> str:
    """Encode ``data`` as ``base64(data).base64(hmac_sha256(data))``."""
    encoded = base64.b64encode(data.encode("utf-8")).decode("ascii")
    signature = base64.b64encode(_signature(data, secret)).decode("ascii")
    return f"{encoded}.{signature}"


def unsign_data(envelope: str, secret: str) -> Optional[str]:
    """Return the payload of a ``sign_data`` envelope, or None if tampered or malformed."""
    try:
        encoded, signature = envelope.split(".")
        data = base64.b64decode(encoded, validate=True).decode("utf-8")
        expected = base64.b64decode(signature, validate=True)
    except (ValueError, binascii.Error, UnicodeDecodeError):
        return None
    if not hmac.compare_digest(_signature(data, secret), expected):
        return None
    return data


def generate_secure_token(length: int = 32) -> str:
    return secrets.token_hex(length)
