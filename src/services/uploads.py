import structlog

from dataclasses import dataclass
from typing import Optional

from core.config import settings
from core.events import EventDefinition
from core.errors import (
    ConflictError,
    StoreError,
    UnknownRemoteError,
    ValidationError,
    classify_store_error,
)
from models.registration import ProjectUpload
from services.registrations import lookup_registration, require_store
from utils.files import build_object_path, infer_extension
from utils.validation import file_error


log = structlog.get_logger()


@dataclass
class FileUpload:
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ProjectReceipt:
    registration_id: str
    file_path: str
    file_url: str


async def submit_project(store, event: EventDefinition, email: Optional[str],
                         upload: Optional[FileUpload]) -> ProjectReceipt:
    """
    Stores a project file for an existing registration.

    File checks run before any remote call. Then: registration lookup,
    one-upload-per-email check, object upload, upload record insert. The
    first failure aborts the rest.
    """
    config = event.uploads
    if upload is None or not upload.data:
        raise ValidationError("Please select a file to upload.")
    message = file_error(upload.content_type, upload.size, config.allowed_types, settings.MAX_UPLOAD_BYTES)
    if message:
        raise ValidationError(message)

    registration = await lookup_registration(store, event, email)
    email = event.normalize_email(email)
    require_store(store)

    try:
        existing = await store.select_one(config.table, {"email_id": email}, columns="id, email_id")
    except StoreError as e:
        raise UnknownRemoteError("Failed to verify upload status. Please try again.") from e
    if existing:
        log.info("project.duplicate", slug=event.slug, email=email)
        raise ConflictError(config.conflict_message)

    extension = infer_extension(upload.filename, upload.content_type)
    path = build_object_path(config.folder, registration.registration_id, email, extension)

    try:
        await store.upload_object(settings.STORAGE_BUCKET, path, upload.data, upload.content_type)
    except StoreError as e:
        raise UnknownRemoteError(e.message or "Failed to upload file. Please try again.") from e

    record = ProjectUpload(
        registration_id=registration.registration_id,
        email_id=email,
        full_name=registration.full_name,
        competition_course=registration.category,
        file_path=path,
        file_type=extension,
    )
    try:
        await store.insert_one(config.table, record.model_dump(mode="json"))
    except StoreError as e:
        raise classify_store_error(e, config.conflict_message) from e

    log.info("project.uploaded", slug=event.slug, registration_id=registration.registration_id, path=path)
    return ProjectReceipt(
        registration_id=registration.registration_id,
        file_path=path,
        file_url=store.public_url(settings.STORAGE_BUCKET, path),
    )
