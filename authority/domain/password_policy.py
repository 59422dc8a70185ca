import re
from typing import Optional

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,30}$")
SPECIAL_CHARACTERS = "@$!%*?&"

PASSWORD_REQUIREMENTS = (
    "Password must be at least 8 characters long and contain uppercase, "
    "lowercase, number, and special character"
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def password_problem(password: str) -> Optional[str]:
    """
    Check a candidate password against the strength policy.

    Returns:
        None if the password is acceptable, otherwise a human-readable reason
    """
    if len(password) < 8:
        return PASSWORD_REQUIREMENTS
    if not any(c.islower() for c in password):
        return PASSWORD_REQUIREMENTS
    if not any(c.isupper() for c in password):
        return PASSWORD_REQUIREMENTS
    if not any(c.isdigit() for c in password):
        return PASSWORD_REQUIREMENTS
    if not any(c in SPECIAL_CHARACTERS for c in password):
        return PASSWORD_REQUIREMENTS
    return None


def username_problem(username: str) -> Optional[str]:
    if not USERNAME_PATTERN.match(username):
        return "Username must be 3-30 characters and contain only letters, numbers, and underscores"
    return None
