import re

from src.taskboard.domain.exceptions import IdentityError

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    if not _EMAIL_RE.match(normalized):
        raise IdentityError("The email address is badly formatted.")
    return normalized


def check_new_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise IdentityError(
            f"Password should be at least {MIN_PASSWORD_LENGTH} characters."
        )
