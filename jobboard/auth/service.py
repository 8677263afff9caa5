"""
Authentication service layer for business logic.

Every account kind lives in its own partition (table). Operations pick the
partition through ``ACCOUNT_MODELS`` keyed by ``AccountRole``; the role
claim in issued tokens always comes from the partition that authenticated
the caller.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import Settings
from ..core.mailer import SMTPMailer
from ..core.security import (
    hash_password_async,
    verify_password_async,
    dummy_verify_async,
    create_access_token,
    generate_secure_reset_token,
    hash_token,
    get_token_expiry_time
)
from .models import AccountRole, AccountEmail, ACCOUNT_MODELS
from .schemas import (
    ACCOUNT_RESPONSES,
    AuthIdentity,
    EmployerRegistration,
    JobSeekerRegistration,
)
from .utils import (
    build_reset_link,
    normalize_email,
    deliver_password_reset_email,
    deliver_password_changed_notification
)
from .exceptions import (
    InvalidCredentialsException,
    AccountDeactivatedException,
    IncorrectPasswordException,
    EmailAlreadyExistsException,
    InvalidRoleException,
    UserNotFoundException,
    AccountNotFoundException,
    InvalidResetTokenException,
    MailServiceUnavailableException
)

# Set up logging
logger = logging.getLogger(__name__)

# Display labels returned on login, by partition
ROLE_LABELS = {
    AccountRole.JOB_SEEKER: "JobSeeker",
    AccountRole.EMPLOYER: "Employer",
    AccountRole.ADMIN: "Admin",
}


def find_account_by_email(db: Session, role: AccountRole, email: str):
    model = ACCOUNT_MODELS[role]
    return db.query(model).filter(model.email == normalize_email(email)).first()


def email_in_use(db: Session, email: str) -> bool:
    """
    Check every partition, and the email registry, for ``email``.

    Soft-deleted accounts count as in use.
    """
    email = normalize_email(email)
    if db.query(AccountEmail).filter(AccountEmail.email == email).first():
        return True
    return any(find_account_by_email(db, role, email) for role in ACCOUNT_MODELS)


def serialize_account(role: AccountRole, account) -> Dict[str, Any]:
    """Public profile of an account; the password hash is never included."""
    return ACCOUNT_RESPONSES[role].model_validate(account).model_dump(mode="json")


def role_label(role: AccountRole, account) -> str:
    if role == AccountRole.ADMIN:
        return account.role or ROLE_LABELS[role]
    return ROLE_LABELS[role]


def issue_token(account, role: AccountRole, settings: Settings) -> str:
    return create_access_token(
        {"id": account.id, "email": account.email, "role": role.value},
        settings
    )


def resolve_role(claim: Optional[str]) -> AccountRole:
    """
    Map a token role claim to its partition.

    Raises:
        InvalidRoleException: If the claim names no known partition
    """
    try:
        return AccountRole(claim)
    except ValueError:
        logger.warning(f"Rejected unknown role claim: {claim!r}")
        raise InvalidRoleException()


async def _register_account(
    db: Session,
    role: AccountRole,
    email: str,
    password: str,
    profile: Dict[str, Any],
    settings: Settings
) -> Dict[str, Any]:
    email = normalize_email(email)
    logger.info(f"{ROLE_LABELS[role]} registration attempt for email: {email}")

    if email_in_use(db, email):
        logger.warning(f"Registration failed: Email {email} already registered")
        raise EmailAlreadyExistsException()

    model = ACCOUNT_MODELS[role]
    account = model(email=email, password=await hash_password_async(password), **profile)
    db.add(account)
    db.add(AccountEmail(email=email, role=role))

    try:
        db.commit()
    except IntegrityError:
        # Another request registered the same email after our pre-check
        db.rollback()
        logger.warning(f"Registration failed: Email {email} claimed concurrently")
        raise EmailAlreadyExistsException()

    db.refresh(account)
    logger.info(f"{ROLE_LABELS[role]} account created: {account.id}")

    return {
        "user": serialize_account(role, account),
        "token": issue_token(account, role, settings)
    }


async def register_job_seeker(db: Session, data: JobSeekerRegistration, settings: Settings) -> Dict[str, Any]:
    """
    Register a new job seeker.

    Args:
        db: Database session
        data: Validated registration payload
        settings: Application settings

    Returns:
        Dict with the created profile and an access token

    Raises:
        EmailAlreadyExistsException: If the email is used by any account
    """
    profile = data.model_dump(exclude={"email", "password"})
    return await _register_account(db, AccountRole.JOB_SEEKER, data.email, data.password, profile, settings)


async def register_employer(db: Session, data: EmployerRegistration, settings: Settings) -> Dict[str, Any]:
    """
    Register a new employer.

    Args:
        db: Database session
        data: Validated registration payload
        settings: Application settings

    Returns:
        Dict with the created profile and an access token

    Raises:
        EmailAlreadyExistsException: If the email is used by any account
    """
    profile = data.model_dump(exclude={"email", "password"})
    return await _register_account(db, AccountRole.EMPLOYER, data.email, data.password, profile, settings)


async def _check_credentials(role: AccountRole, account, password: str) -> None:
    """
    Verify the password, then the soft-delete flag.

    The deleted check runs second so only a caller who knows the password
    learns that the account is deactivated.
    """
    if not await verify_password_async(password, account.password):
        logger.warning(f"Login failed: Invalid password for {account.email}")
        raise InvalidCredentialsException()

    if role != AccountRole.ADMIN and account.deleted:
        logger.warning(f"Login failed: Account {account.email} is deactivated")
        raise AccountDeactivatedException()


def _login_result(role: AccountRole, account, settings: Settings) -> Dict[str, Any]:
    logger.info(f"Login successful: {ROLE_LABELS[role]} {account.id} ({account.email})")
    return {
        "role": role_label(role, account),
        "user": serialize_account(role, account),
        "token": issue_token(account, role, settings)
    }


async def login_for_role(
    db: Session,
    role: AccountRole,
    email: str,
    password: str,
    settings: Settings
) -> Dict[str, Any]:
    """
    Authenticate against a single partition.

    Args:
        db: Database session
        role: Partition implied by the endpoint
        email: Login email
        password: Plain text password
        settings: Application settings

    Returns:
        Dict with role label, profile and access token

    Raises:
        InvalidCredentialsException: Unknown email or wrong password
        AccountDeactivatedException: Soft-deleted job seeker or employer
    """
    account = find_account_by_email(db, role, email)
    if account is None:
        await dummy_verify_async()
        logger.warning(f"Login failed: No {ROLE_LABELS[role]} account for {email}")
        raise InvalidCredentialsException()

    await _check_credentials(role, account, password)
    return _login_result(role, account, settings)


def find_account_any_role(db: Session, email: str) -> Tuple[Optional[AccountRole], Any]:
    """
    Probe partitions in priority order (JobSeeker, Employer, Admin) and
    return the first match.
    """
    for role in (AccountRole.JOB_SEEKER, AccountRole.EMPLOYER, AccountRole.ADMIN):
        account = find_account_by_email(db, role, email)
        if account is not None:
            return role, account
    return None, None


async def unified_login(db: Session, email: str, password: str, settings: Settings) -> Dict[str, Any]:
    """
    Authenticate without the caller naming a role.

    Raises:
        InvalidCredentialsException: Unknown email or wrong password
        AccountDeactivatedException: Soft-deleted job seeker or employer
    """
    role, account = find_account_any_role(db, email)
    if account is None:
        await dummy_verify_async()
        logger.warning(f"Unified login failed: No account for {email}")
        raise InvalidCredentialsException()

    await _check_credentials(role, account, password)
    return _login_result(role, account, settings)


def _load_identity_account(db: Session, identity: AuthIdentity):
    role = resolve_role(identity.role)
    account = db.get(ACCOUNT_MODELS[role], identity.id)
    if account is None:
        logger.warning(f"Authenticated {role.value} {identity.id} no longer exists")
        raise UserNotFoundException()
    return role, account


def get_current_account(db: Session, identity: AuthIdentity) -> Dict[str, Any]:
    """
    Profile of the authenticated caller.

    Raises:
        InvalidRoleException: Role claim is not a known partition
        UserNotFoundException: Account row is gone
    """
    role, account = _load_identity_account(db, identity)
    return serialize_account(role, account)


async def change_password(
    db: Session,
    identity: AuthIdentity,
    current_password: str,
    new_password: str,
    settings: Settings,
    mailer: SMTPMailer,
    background_tasks: Optional[BackgroundTasks] = None
) -> Dict[str, Any]:
    """
    Allows a currently authenticated user to change their password.
    Existing tokens stay valid.

    Raises:
        InvalidRoleException: Role claim is not a known partition
        UserNotFoundException: Account row is gone
        IncorrectPasswordException: The current password is incorrect
    """
    role, account = _load_identity_account(db, identity)

    if not await verify_password_async(current_password, account.password):
        logger.warning(f"Password change failed: wrong current password for {account.email}")
        raise IncorrectPasswordException()

    account.password = await hash_password_async(new_password)
    account.modified = datetime.now(timezone.utc)
    db.commit()
    logger.info(f"{ROLE_LABELS[role]} {account.id} changed their password")

    if background_tasks is not None:
        background_tasks.add_task(
            deliver_password_changed_notification, mailer, settings.app_name, account.email
        )

    return {"success": True, "message": "Password updated successfully"}


async def request_password_reset(
    db: Session,
    email: str,
    role: AccountRole,
    settings: Settings,
    mailer: SMTPMailer,
    background_tasks: BackgroundTasks
) -> Dict[str, Any]:
    """
    Issue a reset token and queue the reset email.

    The token is committed before the email is queued. Delivery happens
    after the response; its failures are logged by the background task.

    Args:
        db: Database session
        email: Account email
        role: JOB_SEEKER or EMPLOYER
        settings: Application settings
        mailer: Mail transport
        background_tasks: Queue for the delivery task

    Raises:
        MailServiceUnavailableException: Mail is not configured
        AccountNotFoundException: No account with that email in the partition
    """
    if not mailer.is_configured():
        logger.error("Password reset requested but mail is not configured")
        raise MailServiceUnavailableException()

    account = find_account_by_email(db, role, email)
    if account is None:
        logger.warning(f"Password reset failed: No {ROLE_LABELS[role]} account for {email}")
        raise AccountNotFoundException()

    reset_token = generate_secure_reset_token()
    expires_at = get_token_expiry_time(settings.reset_token_expire_minutes)

    account.reset_token = hash_token(reset_token)
    account.token_expiry = expires_at
    db.commit()
    logger.info(f"Password reset token issued for {ROLE_LABELS[role]} {account.id}")

    reset_link = build_reset_link(settings.frontend_url, reset_token, role)
    background_tasks.add_task(
        deliver_password_reset_email,
        mailer,
        settings.app_name,
        account.email,
        reset_link,
        expires_at,
        settings.reset_token_expire_minutes
    )

    return {"success": True, "message": "Reset email sent!"}


async def reset_password(
    db: Session,
    token: str,
    role: AccountRole,
    new_password: str,
    settings: Settings,
    mailer: SMTPMailer,
    background_tasks: Optional[BackgroundTasks] = None
) -> Dict[str, Any]:
    """
    Set a new password using an emailed reset token.

    Token match and expiry are checked in one query, so a wrong token and
    an expired one are indistinguishable to the caller.

    Raises:
        InvalidResetTokenException: No live token matched
    """
    model = ACCOUNT_MODELS[role]
    account = db.query(model).filter(
        model.reset_token == hash_token(token),
        model.token_expiry > datetime.now(timezone.utc)
    ).first()

    if account is None:
        logger.warning(f"Password reset failed: invalid or expired {ROLE_LABELS[role]} token")
        raise InvalidResetTokenException()

    account.password = await hash_password_async(new_password)
    account.reset_token = None
    account.token_expiry = None
    account.modified = datetime.now(timezone.utc)
    db.commit()
    logger.info(f"Password reset successful for {ROLE_LABELS[role]} {account.id}")

    if background_tasks is not None:
        background_tasks.add_task(
            deliver_password_changed_notification, mailer, settings.app_name, account.email
        )

    return {"success": True, "message": "Password reset successful!"}
