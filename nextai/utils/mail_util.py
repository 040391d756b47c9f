# nextai/utils/mail_util.py
import logging
import smtplib
from email.mime.text import MIMEText

from nextai.config import GMAIL_SMTP_CONFIG, settings

logger = logging.getLogger(__name__)


def send_email(receiver_email: str, subject: str, html: str) -> bool:
    """Send an HTML mail through Gmail SMTP. Failures are logged, never raised."""
    sender_email = GMAIL_SMTP_CONFIG["sender_email"]
    sender_password = GMAIL_SMTP_CONFIG["sender_password"]

    if not settings.MAIL_ENABLED or not sender_email or not sender_password:
        logger.info("mail disabled or not configured, skipped '%s' to %s", subject, receiver_email)
        return False

    msg = MIMEText(html, "html", "utf-8")
    msg["Subject"] = subject
    msg["From"] = sender_email
    msg["To"] = receiver_email

    try:
        with smtplib.SMTP_SSL("smtp.gmail.com", 465) as smtp:
            smtp.login(sender_email, sender_password)
            smtp.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError):
        logger.exception("sending '%s' to %s failed", subject, receiver_email)
        return False


def send_verification_email(receiver_email: str, code: str) -> bool:
    link = f"{settings.SITE_URL}/auth/user/verify?code={code}"
    html = (
        "<p>Welcome to Next-AI! Your account has been created. "
        f"Your verification code is <strong>{code}</strong>.</p>"
        f"<p>It expires in {settings.SIGNUP_CODE_TTL_MINUTES} minutes. "
        f'You can also verify here: <a href="{link}">{link}</a></p>'
    )
    return send_email(receiver_email, "Welcome to Next-AI", html)


def send_reset_email(receiver_email: str, code: str, audience: str = "user") -> bool:
    link = f"{settings.SITE_URL}/auth/{audience}/forgot-password/reset?code={code}"
    html = (
        "<p>You have requested to reset your password. "
        f"Your verification code is <strong>{code}</strong>.</p>"
        f"<p>It expires in {settings.RESET_CODE_TTL_MINUTES} minutes. "
        f'Reset here: <a href="{link}">{link}</a></p>'
    )
    return send_email(receiver_email, "Reset your password", html)
