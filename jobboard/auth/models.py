"""
Account models for the three independently stored account partitions.

JobSeeker, Employer and Admin rows share the columns defined on
``AccountMixin``. Email uniqueness across partitions is backed by the
``account_emails`` registry: every account insert writes a registry row in
the same transaction.
"""
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.sql import func
from ..database import Base


class AccountRole(str, enum.Enum):
    """
    Enumeration of account partitions. Values are the role claims carried
    in issued tokens.

    Roles:
    - JOB_SEEKER: People looking for work
    - EMPLOYER: Clinics/companies posting jobs
    - ADMIN: Operators of the job board
    """
    JOB_SEEKER = "jobSeeker"
    EMPLOYER = "employer"
    ADMIN = "admin"


class AccountMixin:
    """
    Columns common to every account partition.

    Fields:
    - id: Primary key within the partition
    - email: Login email, unique within the partition
    - password: bcrypt hash, never the clear text
    - reset_token: SHA-256 digest of the emailed reset secret (nullable)
    - token_expiry: End of the reset window (nullable)
    - created: When the account was created
    - modified: When the account was last updated
    """
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    reset_token = Column(String, nullable=True, index=True)
    token_expiry = Column(DateTime(timezone=True), nullable=True)
    created = Column(DateTime(timezone=True), server_default=func.now())
    modified = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class JobSeeker(AccountMixin, Base):
    __tablename__ = "job_seekers"

    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    desired_job = Column(String, nullable=True)
    deleted = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<JobSeeker(id={self.id}, email='{self.email}')>"


class Employer(AccountMixin, Base):
    __tablename__ = "employers"

    clinic_name = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    website = Column(String, nullable=True)
    deleted = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Employer(id={self.id}, email='{self.email}')>"


class Admin(AccountMixin, Base):
    """
    Admin accounts have no soft-delete flag. ``role`` is a display label
    (e.g. "SuperAdmin") returned on login, not the token role claim.
    """
    __tablename__ = "admins"

    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="Admin")

    def __repr__(self):
        return f"<Admin(id={self.id}, email='{self.email}', role='{self.role}')>"


class AccountEmail(Base):
    """
    Registry of every email in use across all partitions.

    The primary key on ``email`` is the store-level guarantee of
    cross-partition uniqueness.
    """
    __tablename__ = "account_emails"

    email = Column(String, primary_key=True)
    role = Column(Enum(AccountRole), nullable=False)
    created = Column(DateTime(timezone=True), server_default=func.now())


# Partition lookup by role, in unified-login priority order
ACCOUNT_MODELS = {
    AccountRole.JOB_SEEKER: JobSeeker,
    AccountRole.EMPLOYER: Employer,
    AccountRole.ADMIN: Admin,
}

# Partitions that may use self-service password reset
RESETTABLE_ROLES = (AccountRole.JOB_SEEKER, AccountRole.EMPLOYER)
