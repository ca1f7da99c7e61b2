from __future__ import annotations

import re

from authchat.types.answer_types import Error, ErrorCode

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

EMPTY_FIELDS_MESSAGE = "Please fill in all fields"
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
SHORT_PASSWORD_MESSAGE = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"


def _validation_error(message: str) -> Error:
    return Error(code=ErrorCode.VALIDATION, message=message)


def validate_registration(
    username: str,
    email: str,
    password: str,
    confirm_password: str,
) -> Error | None:
    if not all(field.strip() for field in (username, email, password, confirm_password)):
        return _validation_error(EMPTY_FIELDS_MESSAGE)

    if not EMAIL_RE.match(email.strip()):
        return _validation_error(INVALID_EMAIL_MESSAGE)

    if len(password) < MIN_PASSWORD_LENGTH:
        return _validation_error(SHORT_PASSWORD_MESSAGE)

    if password != confirm_password:
        return _validation_error(PASSWORD_MISMATCH_MESSAGE)

    return None


def validate_login(username: str, password: str) -> Error | None:
    if not username.strip() or not password.strip():
        return _validation_error(EMPTY_FIELDS_MESSAGE)

    return None
