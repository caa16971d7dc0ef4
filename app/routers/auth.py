# app/routers/auth.py
"""
Registration, email verification, login and password reset for both roles.
Verification / reset emails go out through BackgroundTasks after the commit.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.routers.deps import Principal, get_current_principal
from app.schemas.auth import (
    AdminRegister, UserRegister, LoginIn, VerifyEmailIn,
    ResendVerificationIn, ForgotPasswordIn, ResetPasswordIn,
)
from app.schemas.user import AdminOut, UserOut
from app.services import auth_service
from app.services.email_service import queue_emails
from app.utils.responses import success_response, serialize

router = APIRouter()


def _account_out(account, role: str) -> dict:
    return serialize(AdminOut if role == "admin" else UserOut, account)


# ── Users ────────────────────────────────────────────────────────────────────

@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register a driver account")
def register(body: UserRegister, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    user, emails = auth_service.register_user(db, body.name, body.email, body.password, body.plate_number)
    queue_emails(background_tasks, emails)
    return success_response(
        "Registration successful. Please check your email for verification code.",
        {"user": _account_out(user, "user")},
    )


@router.post("/login", summary="User login")
def login(body: LoginIn, db: Session = Depends(get_db)):
    result = auth_service.login(db, body.email, body.password, "user")
    return success_response("Login successful", {
        "token": result["token"],
        "user": _account_out(result["account"], "user"),
    })


@router.post("/verify-email", summary="Verify a user's email with the emailed code")
def verify_email(body: VerifyEmailIn, db: Session = Depends(get_db)):
    user = auth_service.verify_email(db, body.email, body.code, "user")
    return success_response(
        "Email verified successfully. Please wait for admin approval.",
        {"user": _account_out(user, "user")},
    )


@router.post("/resend-verification", summary="Send a new verification code")
def resend_verification(body: ResendVerificationIn, background_tasks: BackgroundTasks,
                        db: Session = Depends(get_db)):
    queue_emails(background_tasks, auth_service.resend_verification(db, body.email, body.role))
    return success_response("Verification code sent")


@router.post("/forgot-password", summary="Send a password reset code")
def forgot_password(body: ForgotPasswordIn, background_tasks: BackgroundTasks,
                    db: Session = Depends(get_db)):
    queue_emails(background_tasks, auth_service.forgot_password(db, body.email, body.role))
    return success_response("Password reset code sent to your email")


@router.post("/reset-password", summary="Reset a password with the emailed code")
def reset_password(body: ResetPasswordIn, db: Session = Depends(get_db)):
    auth_service.reset_password(db, body.email, body.code, body.new_password, body.role)
    return success_response("Password reset successful")


# ── Admins ───────────────────────────────────────────────────────────────────

@router.post("/admin/register", status_code=status.HTTP_201_CREATED, summary="Register an admin account")
def admin_register(body: AdminRegister, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    admin, emails = auth_service.register_admin(db, body.name, body.email, body.password)
    queue_emails(background_tasks, emails)
    return success_response(
        "Admin registration successful. Please check your email for verification code.",
        {"admin": _account_out(admin, "admin")},
    )


@router.post("/admin/login", summary="Admin login")
def admin_login(body: LoginIn, db: Session = Depends(get_db)):
    result = auth_service.login(db, body.email, body.password, "admin")
    return success_response("Login successful", {
        "token": result["token"],
        "admin": _account_out(result["account"], "admin"),
    })


@router.post("/admin/verify-email", summary="Verify an admin's email with the emailed code")
def admin_verify_email(body: VerifyEmailIn, db: Session = Depends(get_db)):
    admin = auth_service.verify_email(db, body.email, body.code, "admin")
    return success_response("Email verified successfully", {"admin": _account_out(admin, "admin")})


@router.get("/me", summary="The authenticated account")
def me(principal: Principal = Depends(get_current_principal)):
    return success_response(data={
        "role": principal.role,
        "account": _account_out(principal.account, principal.role),
    })
