"""
Core security utilities for authentication and password handling.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import jwt, JWTError
from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool
import secrets
import hashlib
import logging

from ..config import Settings

# Set up logging
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to compare against

    Returns:
        bool: True if password matches hash
    """
    return pwd_context.verify(plain_password, hashed_password)

# bcrypt is CPU bound; the async variants keep it off the event loop.

async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)

async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)

async def dummy_verify_async() -> None:
    """Spend the same time as a real verify when no account matched."""
    await run_in_threadpool(pwd_context.dummy_verify)

def create_access_token(
    data: Dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode (id, email, role)
        settings: Application settings holding the signing key
        expires_delta: Token lifetime, defaults to access_token_expire_minutes

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

def decode_access_token(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string
        settings: Application settings holding the signing key

    Returns:
        Dict containing token payload if valid, None if invalid or expired
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None

def generate_secure_reset_token() -> str:
    """
    Generate a 256-bit random token for password reset, hex encoded.

    Returns:
        str: Secure random token (64 hex characters)
    """
    return secrets.token_hex(32)

def hash_token(token: str) -> str:
    """
    Hash a token for secure storage.

    Args:
        token: Token to hash

    Returns:
        str: Hashed token
    """
    return hashlib.sha256(token.encode()).hexdigest()

def get_token_expiry_time(minutes: int) -> datetime:
    """
    Get token expiration time.

    Args:
        minutes: Minutes until expiration

    Returns:
        datetime: Expiration time (UTC)
    """
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)
