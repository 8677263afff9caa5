"""
FastAPI dependencies for authentication.
"""
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError

from ..config import Settings, get_settings
from ..core.mailer import SMTPMailer
from ..core.security import decode_access_token
from .exceptions import InvalidTokenException
from .schemas import AuthIdentity

# Bearer token scheme; auto_error is off so a missing header goes through our own 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_mailer(settings: Settings = Depends(get_settings)) -> SMTPMailer:
    """Mail transport built from the application settings."""
    return SMTPMailer(settings)


def get_current_identity(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings)
) -> AuthIdentity:
    """
    Verify the bearer token and return its identity claims.

    The role claim is returned as-is; the service rejects unknown roles.

    Raises:
        InvalidTokenException: Missing, malformed, tampered or expired token
    """
    if not token:
        raise InvalidTokenException("Not authenticated")

    payload = decode_access_token(token, settings)
    if payload is None:
        raise InvalidTokenException()

    try:
        return AuthIdentity(
            id=payload.get("id"),
            email=payload.get("email"),
            role=payload.get("role")
        )
    except ValidationError:
        raise InvalidTokenException("Invalid token payload")
