"""
Authentication-specific exceptions.
"""
from fastapi import status
from ..exceptions import AppException

class AuthException(AppException):
    """Base class for authentication exceptions."""
    def __init__(self, status_code: int, detail: str, headers: dict = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

class InvalidCredentialsException(AuthException):
    """Exception raised when credentials are invalid."""
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class AccountDeactivatedException(AuthException):
    """Exception raised when a soft-deleted account tries to log in."""
    def __init__(self, detail: str = "Account deactivated"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class IncorrectPasswordException(AuthException):
    """Exception raised when the current password does not match on change."""
    def __init__(self, detail: str = "Current password is incorrect"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class EmailAlreadyExistsException(AuthException):
    """Exception raised when email already exists."""
    def __init__(self, detail: str = "Email is already registered"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class InvalidTokenException(AuthException):
    """Exception raised when a bearer token is missing, invalid or expired."""
    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )

class InvalidRoleException(AuthException):
    """Exception raised when a token carries a role claim we do not know."""
    def __init__(self, detail: str = "Invalid role"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class UserNotFoundException(AuthException):
    """Exception raised when the authenticated account no longer exists."""
    def __init__(self, detail: str = "User not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class AccountNotFoundException(AuthException):
    """Exception raised when a reset is requested for an unknown email."""
    def __init__(self, detail: str = "Email not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class InvalidResetTokenException(AuthException):
    """Exception raised when a reset token is wrong, used or expired."""
    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class MailServiceUnavailableException(AuthException):
    """Exception raised when reset email cannot be sent because mail is not configured."""
    def __init__(self, detail: str = "Email service unavailable"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
