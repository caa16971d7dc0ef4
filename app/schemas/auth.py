# app/schemas/auth.py
import re
from pydantic import BaseModel, Field, field_validator
from typing import Literal

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PLATE_RE = re.compile(r"^[A-Z0-9]{3,10}$")

Role = Literal["user", "admin"]


def _check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_RE.match(value):
        raise ValueError("Valid email address is required")
    return value


class EmailIn(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)


class AdminRegister(EmailIn):
    name: str = Field(..., min_length=2, max_length=255)
    password: str = Field(..., min_length=6)


class UserRegister(AdminRegister):
    plate_number: str

    @field_validator("plate_number")
    @classmethod
    def validate_plate(cls, v):
        plate = re.sub(r"[\s-]", "", v).upper()
        if not PLATE_RE.match(plate):
            raise ValueError("Valid plate number is required (3-10 alphanumeric characters)")
        return plate


class LoginIn(EmailIn):
    password: str


class VerifyEmailIn(EmailIn):
    code: str = Field(..., min_length=6, max_length=6)


class ResendVerificationIn(EmailIn):
    role: Role = "user"


class ForgotPasswordIn(EmailIn):
    role: Role = "user"


class ResetPasswordIn(EmailIn):
    code: str = Field(..., min_length=6, max_length=6)
    new_password: str = Field(..., min_length=6)
    role: Role = "user"


class ProfileUpdate(EmailIn):
    name: str = Field(..., min_length=2, max_length=255)


class ChangePasswordIn(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
