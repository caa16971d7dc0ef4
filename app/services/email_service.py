# app/services/email_service.py
"""
Outbound email through the SendGrid v3 HTTP API.

Workflows never send mail themselves: they return OutboundEmail values and the
routers hand them to BackgroundTasks, so delivery happens after the commit.
Delivery is best effort: failures are logged, never raised.
"""

from dataclasses import dataclass
import httpx
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


@dataclass
class OutboundEmail:
    to: str
    subject: str
    html: str


async def send_email(message: OutboundEmail) -> bool:
    """
    Deliver one message. Returns True when the provider accepted it.
    Without SENDGRID_API_KEY the message is only logged.
    """
    if not settings.SENDGRID_API_KEY:
        logger.info(f"[EMAIL] (not configured) to={message.to} subject={message.subject!r}")
        return False

    payload = {
        "personalizations": [{"to": [{"email": message.to}]}],
        "from": {"email": settings.EMAIL_FROM},
        "subject": message.subject,
        "content": [{"type": "text/html", "value": message.html}],
    }
    headers = {"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"}

    try:
        async with httpx.AsyncClient(timeout=settings.EMAIL_TIMEOUT_SECONDS) as client:
            response = await client.post(SENDGRID_URL, json=payload, headers=headers)
            if response.status_code in (200, 202):
                logger.info(f"[EMAIL] Sent to={message.to} subject={message.subject!r}")
                return True
            logger.warning(f"[EMAIL] SendGrid returned HTTP {response.status_code} for {message.to}")
            return False
    except Exception as e:
        logger.error(f"[EMAIL] Failed for {message.to}: {e}")
        return False


def queue_emails(background_tasks, messages) -> None:
    """Schedule messages to run after the response has been sent."""
    for message in messages or ():
        background_tasks.add_task(send_email, message)


# ── Templates ────────────────────────────────────────────────────────────────

def otp_email(to: str, code: str, purpose: str) -> OutboundEmail:
    if purpose == "reset":
        subject, heading = "Reset Your Password", "Password Reset"
        line = f"Your password reset code is: <strong>{code}</strong>"
    else:
        subject, heading = "Verify Your Email", "Email Verification"
        line = f"Your verification code is: <strong>{code}</strong>"
    html = (
        f"<h1>{heading}</h1><p>{line}</p>"
        f"<p>This code will expire in {settings.OTP_EXPIRY_MINUTES} minutes.</p>"
    )
    return OutboundEmail(to=to, subject=subject, html=html)


def user_approved_email(to: str, name: str, slot_number: str) -> OutboundEmail:
    return OutboundEmail(
        to=to,
        subject="Account Approved",
        html=(
            f"<h1>Account Approved</h1><p>Dear {name},</p>"
            f"<p>Your account has been approved. You have been assigned parking slot {slot_number}.</p>"
            "<p>Best regards,<br>Parking Management Team</p>"
        ),
    )


def user_rejected_email(to: str, name: str, reason: str) -> OutboundEmail:
    return OutboundEmail(
        to=to,
        subject="Account Rejected",
        html=(
            f"<h1>Account Rejected</h1><p>Dear {name},</p>"
            f"<p>Your account has been rejected for the following reason:</p><p><strong>{reason}</strong></p>"
            "<p>If you have any questions, please contact our support team.</p>"
        ),
    )


def request_approved_email(to: str, name: str, slot_number: str) -> OutboundEmail:
    return OutboundEmail(
        to=to,
        subject="Parking Slot Request Approved",
        html=(
            f"<h1>Parking Slot Request Approved</h1><p>Dear {name},</p>"
            f"<p>Your request for parking slot <b>{slot_number}</b> has been approved.</p>"
            "<p>You can now use this slot.</p>"
        ),
    )


def request_rejected_email(to: str, name: str, reason: str) -> OutboundEmail:
    return OutboundEmail(
        to=to,
        subject="Parking Slot Request Rejected",
        html=(
            f"<h1>Parking Slot Request Rejected</h1><p>Dear {name},</p>"
            f"<p>Your slot request was rejected: <strong>{reason}</strong></p>"
        ),
    )
