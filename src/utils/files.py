import re
import time
import mimetypes

from typing import Optional


EXTENSIONS_BY_TYPE = {
    "application/pdf": "pdf",
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",
}


def sanitize_email_fragment(email: str, length: int = 10) -> str:
    """
    Keeps only the alphanumeric characters of the email and cuts them to
    ``length`` so they fit in an object name.
    """
    return re.sub(r"[^a-zA-Z0-9]", "", email or "")[:length]


def infer_extension(filename: Optional[str], content_type: Optional[str] = None) -> str:
    """
    Extension of the uploaded file, taken from its name and falling back to the
    declared content type.

    :param filename: Original client file name.
    :param content_type: MIME type sent with the upload.
    :return: Lower-case extension without the dot, or ``"bin"``.
    """
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].strip().lower()
        if ext:
            return ext
    if content_type in EXTENSIONS_BY_TYPE:
        return EXTENSIONS_BY_TYPE[content_type]
    guessed = mimetypes.guess_extension(content_type or "")
    return guessed.lstrip(".") if guessed else "bin"


def build_object_path(
    folder: str,
    registration_id: str,
    email: str,
    extension: str,
    timestamp: Optional[float] = None,
) -> str:
    """
    Storage path in the format:
    {folder}/{registration_id}_{email_fragment}_{unix_timestamp}.{extension}

    :param folder: Event folder inside the bucket.
    :param registration_id: Display identifier of the registration.
    :param email: Email of the registrant.
    :param extension: File extension (without the dot).
    :param timestamp: Unix time; defaults to now.
    :return: Object path relative to the bucket.
    """
    ts = int(timestamp if timestamp is not None else time.time())
    filename = f"{registration_id}_{sanitize_email_fragment(email)}_{ts}.{extension}"
    return f"{folder}/{filename}"
