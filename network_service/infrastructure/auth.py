"""
Password hashing and token utilities
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, Tuple
import hashlib
import logging
import secrets

import bcrypt
from jose import jwt, JWTError

from ..config import settings

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password with a per-password salt"""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Verify a password against its hash"""
    encoded = password.encode("utf-8")
    # Nothing longer than bcrypt's 72-byte input can have been stored
    if not password_hash or len(encoded) > 72:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token"""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT, None if invalid or expired"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def generate_token_hash(token: str) -> str:
    """SHA-256 hex digest of a token, for storage"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str, datetime]:
    """
    Generate a password reset token

    Returns:
        Tuple of (raw_token, token_hash, expires_at)
    """
    token = secrets.token_hex(20)
    expires_at = datetime.utcnow() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    return token, generate_token_hash(token), expires_at
