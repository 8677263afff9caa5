"""
Account Schemas - Pydantic models for request validation and serialization.

Request bodies accept the camelCase field names used by the web client
(``currentPassword``, ``newPassword``) as well as snake_case.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
from .models import AccountRole, RESETTABLE_ROLES

# bcrypt only looks at the first 72 bytes
PASSWORD_MAX_LENGTH = 72


class AccountCreate(BaseModel):
    """
    Fields common to every self-registration.

    Fields:
    - email: Login email, unique across all account kinds
    - password: Plain text password (hashed before storage)
    """
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)


class JobSeekerRegistration(AccountCreate):
    """
    Job Seeker Registration Schema

    Fields:
    - name: Full name
    - phone, address, desired_job: Optional profile details
    """
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None
    desired_job: Optional[str] = None


class EmployerRegistration(AccountCreate):
    """
    Employer Registration Schema

    Fields:
    - clinic_name: Name of the hiring clinic or company
    - contact_person, phone, address, website: Optional details
    """
    clinic_name: str = Field(..., min_length=1)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None


class UserLogin(BaseModel):
    """
    Login Schema - email is kept as a plain string so malformed addresses
    get the same 401 as unknown ones.
    """
    email: str
    password: str


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword", min_length=1, max_length=PASSWORD_MAX_LENGTH)


class PasswordResetRequest(BaseModel):
    """
    Password Reset Request Schema

    Fields:
    - email: Account email
    - role: "jobSeeker" or "employer"; admins cannot self-reset
    """
    email: EmailStr
    role: AccountRole

    @field_validator("role")
    @classmethod
    def role_must_be_resettable(cls, value: AccountRole) -> AccountRole:
        if value not in RESETTABLE_ROLES:
            raise ValueError("Password reset is only available for jobSeeker and employer accounts")
        return value


class PasswordResetConfirm(BaseModel):
    """
    Password Reset Schema - Used to set a new password with an emailed token
    """
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    role: AccountRole
    new_password: str = Field(..., alias="newPassword", min_length=1, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("role")
    @classmethod
    def role_must_be_resettable(cls, value: AccountRole) -> AccountRole:
        if value not in RESETTABLE_ROLES:
            raise ValueError("Password reset is only available for jobSeeker and employer accounts")
        return value


class AuthIdentity(BaseModel):
    """Claims taken from a verified bearer token."""
    id: int
    email: str
    role: str


class AccountResponse(BaseModel):
    """
    Account Response Schema - shared profile fields, never the password
    or reset token.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    created: Optional[datetime] = None
    modified: Optional[datetime] = None


class JobSeekerResponse(AccountResponse):
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    desired_job: Optional[str] = None
    deleted: bool = False


class EmployerResponse(AccountResponse):
    clinic_name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    deleted: bool = False


class AdminResponse(AccountResponse):
    name: Optional[str] = None
    role: str = "Admin"


ACCOUNT_RESPONSES = {
    AccountRole.JOB_SEEKER: JobSeekerResponse,
    AccountRole.EMPLOYER: EmployerResponse,
    AccountRole.ADMIN: AdminResponse,
}


class SuccessResponse(BaseModel):
    success: bool = True
    message: str
