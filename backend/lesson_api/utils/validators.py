"""Input validation for registration.

`validate_register_input` collects every problem instead of stopping at
the first one so the client can highlight all offending fields at once.
"""

from typing import Dict, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

USERNAME_MIN = 6
USERNAME_MAX = 12


def is_email(value: str) -> bool:
    """Return True if `value` follows the email address grammar.

    Deliverability (DNS) is not checked.
    """
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_register_input(
    username: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str],
    email: Optional[str],
) -> Tuple[bool, Dict[str, str]]:
    """Return `(valid, errors)` where `errors` maps field -> message."""
    errors: Dict[str, str] = {}
    if not username:
        errors["username"] = "username is required"
    elif not USERNAME_MIN <= len(username) <= USERNAME_MAX:
        errors["username"] = f"username must be {USERNAME_MIN}-{USERNAME_MAX} characters"
    if not password:
        errors["password"] = "password is required"
    if password != confirm_password:
        errors["confirmPassword"] = "passwords do not match"
    if not email:
        errors["email"] = "email is required"
    elif not is_email(email.strip()):
        errors["email"] = "email is not valid"
    return not errors, errors
