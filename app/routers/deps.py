# app/routers/deps.py
"""
Authentication & authorization gate.
Every protected route depends on one of get_current_principal,
require_approved_user or require_admin.
"""

from dataclasses import dataclass
from typing import Optional, Union
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.admin import Admin
from app.models.user import User
from app.services.auth_service import get_account
from app.services.security import decode_access_token
from app.utils.exceptions import Forbidden, Unauthenticated

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    role: str
    account: Union[User, Admin]

    @property
    def id(self) -> int:
        return self.account.id


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated("No token provided")

    payload = decode_access_token(credentials.credentials)
    account = get_account(db, payload["id"], payload["role"])
    if not account:
        raise Unauthenticated("Invalid token")
    if not account.is_email_verified:
        raise Forbidden("Please verify your email first")
    return Principal(role=payload["role"], account=account)


def require_approved_user(principal: Principal = Depends(get_current_principal)) -> User:
    if principal.role != "user":
        raise Forbidden("Access denied. User only.")
    if principal.account.status != "approved":
        raise Forbidden("Your account is not approved yet")
    return principal.account


def require_admin(principal: Principal = Depends(get_current_principal)) -> Admin:
    if principal.role != "admin":
        raise Forbidden("Access denied. Admin only.")
    return principal.account
