# app/services/auth_service.py
"""
Identity & onboarding: registration, OTP email verification, login,
password reset and self-service profile changes for users and admins.
"""

from datetime import datetime
from sqlalchemy.orm import Session
from app.models.user import User
from app.models.admin import Admin
from app.services import otp_service
from app.services.email_service import otp_email
from app.services.security import hash_password, verify_password, create_access_token
from app.utils.exceptions import Conflict, NotFound, Unauthenticated, ValidationFailed
from app.utils.logger import get_logger

logger = get_logger(__name__)

MODELS = {"user": User, "admin": Admin}
MIN_USER_PASSWORD_CHANGE = 8
MIN_ADMIN_PASSWORD_CHANGE = 6


def _model(role: str):
    try:
        return MODELS[role]
    except KeyError:
        raise ValidationFailed(f"Unknown role: {role}")


def find_account(db: Session, email: str, role: str):
    model = _model(role)
    return db.query(model).filter(model.email == email).first()


def get_account(db: Session, account_id: int, role: str):
    model = _model(role)
    return db.query(model).filter(model.id == account_id).first()


def _register(db: Session, account, role: str):
    if find_account(db, account.email, role):
        label = "Email already registered" if role == "user" else "Admin with this email already exists"
        raise Conflict(label)
    db.add(account)
    otp = otp_service.issue_otp(db, account.email, "verification", role)
    db.commit()
    db.refresh(account)
    logger.info(f"[AUTH] Registered {role} {account.email} (id={account.id})")
    return account, [otp_email(account.email, otp.code, "verification")]


def register_user(db: Session, name: str, email: str, password: str, plate_number: str):
    """Create a pending, unverified user and queue the verification code."""
    user = User(
        name=name,
        email=email,
        password=hash_password(password),
        plate_number=plate_number,
        status="pending",
        is_email_verified=False,
    )
    return _register(db, user, "user")


def register_admin(db: Session, name: str, email: str, password: str):
    admin = Admin(name=name, email=email, password=hash_password(password),
                  role="admin", is_email_verified=False)
    return _register(db, admin, "admin")


def verify_email(db: Session, email: str, code: str, role: str, now: datetime = None):
    otp_service.consume_otp(db, email, code, "verification", role, now=now)
    account = find_account(db, email, role)
    if not account:
        db.rollback()
        raise NotFound("User not found" if role == "user" else "Admin not found")
    account.is_email_verified = True
    db.commit()
    logger.info(f"[AUTH] Email verified for {role} {email}")
    return account


def resend_verification(db: Session, email: str, role: str):
    account = find_account(db, email, role)
    if not account:
        raise NotFound("Account not found")
    if account.is_email_verified:
        raise Conflict("Email is already verified")
    otp = otp_service.issue_otp(db, email, "verification", role)
    db.commit()
    return [otp_email(email, otp.code, "verification")]


def login(db: Session, email: str, password: str, role: str) -> dict:
    """Check credentials and account state; return a signed token and the account."""
    account = find_account(db, email, role)
    if not account or not verify_password(password, account.password):
        raise Unauthenticated("Invalid credentials")
    if not account.is_email_verified:
        raise Unauthenticated("Please verify your email first")
    if role == "user":
        if account.status == "rejected":
            raise Unauthenticated("Your account has been rejected")
        if account.status != "approved":
            raise Unauthenticated("Your account is pending approval")

    token = create_access_token(account.id, account.email, role)
    logger.info(f"[AUTH] Login {role} {email}")
    return {"token": token, "account": account}


def forgot_password(db: Session, email: str, role: str):
    if not find_account(db, email, role):
        raise NotFound("Account not found")
    otp = otp_service.issue_otp(db, email, "reset", role)
    db.commit()
    return [otp_email(email, otp.code, "reset")]


def reset_password(db: Session, email: str, code: str, new_password: str, role: str,
                   now: datetime = None):
    otp_service.consume_otp(db, email, code, "reset", role, now=now)
    account = find_account(db, email, role)
    if not account:
        db.rollback()
        raise NotFound("Account not found")
    account.password = hash_password(new_password)
    db.commit()
    logger.info(f"[AUTH] Password reset for {role} {email}")


def update_profile(db: Session, account, name: str, email: str):
    model = type(account)
    if email != account.email:
        taken = db.query(model).filter(model.email == email, model.id != account.id).first()
        if taken:
            raise Conflict("Email already in use")
    account.name = name
    account.email = email
    db.commit()
    db.refresh(account)
    return account


def change_password(db: Session, account, current_password: str, new_password: str):
    minimum = MIN_ADMIN_PASSWORD_CHANGE if isinstance(account, Admin) else MIN_USER_PASSWORD_CHANGE
    if len(new_password) < minimum:
        raise ValidationFailed(f"New password must be at least {minimum} characters long")
    if not verify_password(current_password, account.password):
        raise Unauthenticated("Current password is incorrect")
    account.password = hash_password(new_password)
    db.commit()
