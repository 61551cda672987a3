import re

from typing import Any, Optional, Sequence


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_DIGITS = 10

ALLOWED_PROJECT_TYPES = (
    "application/pdf",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
)

EMAIL_MESSAGE = "Please enter a valid email address."


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value.strip()) is not None


def phone_digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def is_valid_phone(value: Optional[str], exact: bool = True) -> bool:
    digits = phone_digits(value)
    if exact:
        return len(digits) == PHONE_DIGITS
    return len(digits) >= PHONE_DIGITS


def email_error(value: Optional[str], optional: bool = False) -> Optional[str]:
    if optional and is_blank(value):
        return None
    if not is_valid_email(value):
        return EMAIL_MESSAGE
    return None


def phone_error(value: Optional[str], exact: bool = True, message: Optional[str] = None) -> Optional[str]:
    if is_valid_phone(value, exact=exact):
        return None
    if message:
        return message
    if exact:
        return "Please enter a valid 10-digit contact number."
    return "Please enter a valid contact number (at least 10 digits)."


def file_error(content_type: Optional[str], size: int, allowed: Sequence[str], max_bytes: int) -> Optional[str]:
    """
    Checks an upload before anything is sent to the store.

    :param content_type: MIME type reported by the client.
    :param size: Payload size in bytes.
    :param allowed: Accepted MIME types.
    :param max_bytes: Configured size ceiling.
    :return: The message to show, or ``None`` when the file is acceptable.
    """
    if content_type not in allowed:
        return "Invalid file type. Please upload PDF, PPT, or PPTX."
    if size > max_bytes:
        return f"File is too large. Max size is {max_bytes // (1024 * 1024)}MB."
    return None


def link_error(value: Optional[str], required_substring: str, message: str) -> Optional[str]:
    if not value or required_substring not in value:
        return message
    return None
