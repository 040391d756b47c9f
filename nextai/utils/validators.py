import re

from nextai.config import settings

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email) -> bool:
    return isinstance(email, str) and bool(_EMAIL_RE.match(email.strip()))


def password_error(password) -> str | None:
    """None when the password is acceptable, else the message to return."""
    if not isinstance(password, str) or len(password) < settings.PASSWORD_MIN_LENGTH:
        return f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
    return None


def username_error(username) -> str | None:
    if not isinstance(username, str) or len(username.strip()) < settings.USERNAME_MIN_LENGTH:
        return f"Username must be at least {settings.USERNAME_MIN_LENGTH} characters long"
    return None


def normalize_email(email) -> str:
    return email.strip().lower() if isinstance(email, str) else ""


def text_field(data: dict, name: str) -> str | None:
    """The stripped value when it is a non-empty string, else None."""
    value = data.get(name)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _present(value) -> bool:
    # Codes may arrive as JSON numbers; anything else must be a string
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value != ""


def missing_fields(data: dict, *names: str) -> list[str]:
    return [n for n in names if not _present(data.get(n))]
