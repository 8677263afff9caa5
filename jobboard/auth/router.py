"""
Authentication routes for the job board.

Routes only translate HTTP to service calls. Errors raised by the service
are rendered by the handlers in ``jobboard.exceptions``.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..core.mailer import SMTPMailer
from ..database import get_db
from .dependencies import get_current_identity, get_mailer
from .models import AccountRole
from .schemas import (
    AuthIdentity,
    EmployerRegistration,
    JobSeekerRegistration,
    PasswordChange,
    PasswordResetConfirm,
    PasswordResetRequest,
    SuccessResponse,
    UserLogin,
)
from .service import (
    change_password,
    get_current_account,
    login_for_role,
    register_employer,
    register_job_seeker,
    request_password_reset,
    reset_password,
    unified_login,
)

# Create API router
router = APIRouter(prefix="/api/auth", tags=["Authentication"])

# ============================================================================
# REGISTRATION
# ============================================================================

@router.post("/job-seeker/register", status_code=status.HTTP_201_CREATED, summary="Job Seeker Registration")
async def register_job_seeker_route(
    data: JobSeekerRegistration,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Create a job seeker account and return it with an access token."""
    result = await register_job_seeker(db, data, settings)
    return {"success": True, "data": result}

@router.post("/employer/register", status_code=status.HTTP_201_CREATED, summary="Employer Registration")
async def register_employer_route(
    data: EmployerRegistration,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Create an employer account and return it with an access token."""
    result = await register_employer(db, data, settings)
    return {"success": True, "data": result}

# ============================================================================
# LOGIN
# ============================================================================

@router.post("/job-seeker/login", summary="Job Seeker Login")
async def login_job_seeker_route(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    result = await login_for_role(db, AccountRole.JOB_SEEKER, login_data.email, login_data.password, settings)
    return {"success": True, "data": result}

@router.post("/employer/login", summary="Employer Login")
async def login_employer_route(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    result = await login_for_role(db, AccountRole.EMPLOYER, login_data.email, login_data.password, settings)
    return {"success": True, "data": result}

@router.post("/admin/login", summary="Admin Login")
async def login_admin_route(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    result = await login_for_role(db, AccountRole.ADMIN, login_data.email, login_data.password, settings)
    return {"success": True, "data": result}

@router.post("/login", summary="Unified Login")
async def unified_login_route(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Login form shared by all account kinds. The role is detected from the
    partition that holds the email (job seeker, then employer, then admin).
    """
    result = await unified_login(db, login_data.email, login_data.password, settings)
    return {"success": True, "data": result}

# ============================================================================
# AUTHENTICATED ACCOUNT
# ============================================================================

@router.get("/me", summary="Get Current User Profile")
async def get_current_user_route(
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": get_current_account(db, identity)}

@router.put("/change-password", response_model=SuccessResponse, summary="Change Password (Authenticated)")
async def change_password_route(
    password_data: PasswordChange,
    background_tasks: BackgroundTasks,
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: SMTPMailer = Depends(get_mailer)
):
    """Allows an authenticated user to change their own password."""
    return await change_password(
        db,
        identity,
        password_data.current_password,
        password_data.new_password,
        settings,
        mailer,
        background_tasks
    )

# ============================================================================
# PASSWORD RESET
# ============================================================================

@router.post("/request-password-reset", response_model=SuccessResponse, summary="Request Password Reset")
async def request_password_reset_route(
    reset_data: PasswordResetRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: SMTPMailer = Depends(get_mailer)
):
    """
    Store a reset token and email the reset link. The email is sent after
    the response; success here means the token was stored.
    """
    return await request_password_reset(
        db, reset_data.email, reset_data.role, settings, mailer, background_tasks
    )

@router.post("/reset-password", response_model=SuccessResponse, summary="Reset Password with Token")
async def reset_password_route(
    reset_data: PasswordResetConfirm,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: SMTPMailer = Depends(get_mailer)
):
    return await reset_password(
        db,
        reset_data.token,
        reset_data.role,
        reset_data.new_password,
        settings,
        mailer,
        background_tasks
    )
