"""Outbound vendor email over SMTP.

Sending is blocking ``smtplib`` work, pushed to a worker thread. Every send
is best-effort: failures are logged and swallowed. Services never call these
methods inside a unit of work; they enqueue them (see ``dispatch.enqueue``).
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

INVITATION_SUBJECT = "Onboarding Invitation"


def portal_link(token: str) -> str:
    return f"{settings.vendor_portal_url}?token={token}"


def build_invitation_message(to_email: str, vendor_name: str, invitation_link: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.mail_from
    msg["To"] = to_email
    msg["Subject"] = INVITATION_SUBJECT
    msg.set_content(
        f"Dear {vendor_name},\n\n"
        "You have been invited to complete the vendor onboarding process.\n\n"
        f"Please click on the following link to begin:\n{invitation_link}\n\n"
        "If you have any questions, please contact our onboarding team.\n\n"
        "Best regards,\n"
        f"{settings.company_name}"
    )
    return msg


def build_follow_up_message(
    to_email: str,
    vendor_name: str,
    body: str,
    follow_up_type: str,
    token: Optional[str],
) -> EmailMessage:
    link_block = ""
    if token:
        link_block = (
            "\n\nPlease click on the following link to access your vendor portal "
            f"and update your information:\n{portal_link(token)}\n\n"
            "Note: This link will allow you to log in and modify your submitted data.\n"
        )

    msg = EmailMessage()
    msg["From"] = settings.mail_from
    msg["To"] = to_email
    msg["Subject"] = f"Follow-up Required: Vendor Onboarding - {follow_up_type}"
    msg.set_content(
        f"Dear {vendor_name},\n\n"
        "We need your attention regarding your vendor onboarding submission.\n\n"
        "Issue Details:\n"
        f"{body}"
        f"{link_block}\n"
        "What you need to do:\n"
        "1. Click the link above to access your vendor portal\n"
        "2. Review and correct the mentioned fields\n"
        "3. Re-submit your onboarding form\n\n"
        "If you have any questions or need assistance, please contact "
        f"{settings.support_email}.\n\n"
        "Best regards,\n"
        f"{settings.company_name}"
    )
    return msg


class EmailService:
    """SMTP sender; logs instead of sending when SMTP_HOST is not configured."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
    ):
        self.host = host if host is not None else settings.smtp_host
        self.port = port if port is not None else settings.smtp_port
        self.username = username if username is not None else settings.smtp_username
        self.password = password if password is not None else settings.smtp_password
        self.use_tls = settings.smtp_use_tls if use_tls is None else use_tls

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    async def send_invitation(self, to_email: str, vendor_name: str, token: str) -> bool:
        msg = build_invitation_message(to_email, vendor_name, portal_link(token))
        return await self._send(msg)

    async def send_follow_up(
        self,
        to_email: str,
        vendor_name: str,
        body: str,
        follow_up_type: str,
        token: Optional[str] = None,
    ) -> bool:
        msg = build_follow_up_message(to_email, vendor_name, body, follow_up_type, token)
        return await self._send(msg)

    async def _send(self, msg: EmailMessage) -> bool:
        if not self.enabled:
            logger.info("Email disabled; would send '%s' to %s", msg["Subject"], msg["To"])
            return False
        try:
            await asyncio.to_thread(self._send_blocking, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", msg["To"], exc, exc_info=True)
            return False
        logger.info("Email sent successfully to: %s", msg["To"])
        return True

    def _send_blocking(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)
