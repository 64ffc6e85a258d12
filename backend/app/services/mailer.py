"""
Mail delivery

Sends account emails over SMTP (implicit TLS). smtplib blocks, so delivery
runs in a worker thread.
"""
import asyncio
import logging
import smtplib
from email.message import EmailMessage

from ..config import settings

logger = logging.getLogger("uvicorn.error")


def _build_message(to: str, subject: str, text: str, html: str = "") -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.mail_from
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")
    return msg


def _deliver(msg: EmailMessage) -> None:
    with smtplib.SMTP_SSL(settings.email_host, settings.email_port, timeout=30) as smtp:
        if settings.email_user:
            smtp.login(settings.email_user, settings.email_pass or "")
        smtp.send_message(msg)


async def send_email(to: str, subject: str, text: str, html: str = "") -> bool:
    """
    Send an email

    Returns:
    - bool: True when the message was handed to the SMTP server

    Note:
    - Without EMAIL_HOST the message is only logged (local development)
    - Delivery failures are logged; the caller's request still succeeds
    """
    if not settings.email_host:
        logger.warning("[mail] EMAIL_HOST not set, not sending '%s' to %s", subject, to)
        return False

    msg = _build_message(to, subject, text, html)
    try:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _deliver, msg)
    except (smtplib.SMTPException, OSError):
        logger.exception("[mail] failed to send '%s' to %s", subject, to)
        return False
    logger.info("[mail] sent '%s' to %s", subject, to)
    return True


async def send_confirmation_email(to: str, confirmation_link: str) -> bool:
    subject = "Please confirm your email address"
    text = (
        f"Please confirm your email by pasting this link into your browser: {confirmation_link}\n"
        "(Your email inbox does not support HTML)"
    )
    html = (
        f'<a href="{confirmation_link}">{confirmation_link}</a> <br> '
        "<p>Please confirm your email by clicking the link above.</p>"
    )
    return await send_email(to, subject, text, html)
