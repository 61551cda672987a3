"""
Registration workflow shared by every event page: validate, check the event
window, guard against duplicate emails, insert.

The duplicate pre-check is best effort. Two near simultaneous submissions can
both pass it, so the store's unique constraint on the email column is what
actually holds the invariant; its ``23505`` answer is mapped to the same
conflict message.
"""
import structlog

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import ValidationError as FormValidationError

from core.events import EventDefinition, display_registration_id, is_registration_open
from core.errors import (
    ConfigurationError,
    ConflictError,
    RecordLookupError,
    RegistrationClosedError,
    StoreError,
    ValidationError,
    classify_store_error,
)
from schemas.registration import FORM_RULE, RegistrationForm
from utils.validation import is_valid_email


log = structlog.get_logger()


@dataclass
class RegistrationReceipt:
    registration_id: Optional[str]
    record: Dict[str, Any]


@dataclass
class RegistrationLookup:
    registration_id: Optional[str]
    full_name: Optional[str]
    category: Optional[str]
    record: Dict[str, Any]


def validate_form(form_cls: Type[RegistrationForm], data: Mapping[str, Any]) -> RegistrationForm:
    """
    Parses submitted values into ``form_cls``.

    :raises ValidationError: With the message of the first failed rule. Values
        of the wrong type count as missing.
    """
    try:
        return form_cls.model_validate(data)
    except FormValidationError as e:
        first = e.errors()[0]
        if first["type"] == FORM_RULE:
            raise ValidationError(first["msg"]) from e
        raise ValidationError(form_cls.required_message) from e


def require_store(store):
    if store is None:
        raise ConfigurationError()
    return store


async def submit_registration(store, event: EventDefinition, data: Mapping[str, Any]) -> RegistrationReceipt:
    form = validate_form(event.form, data)
    if not is_registration_open(event):
        raise RegistrationClosedError("Registration for this event is closed.")
    require_store(store)

    record = form.to_record()
    email = record.get(event.email_column)

    if event.unique_email and email:
        try:
            existing = await store.select_one(event.table, {event.email_column: email}, columns=event.email_column)
        except StoreError as e:
            # the unique constraint still rejects a duplicate on insert
            log.warning("registration.duplicate_check_failed", slug=event.slug, error=e.message)
            existing = None
        if existing:
            log.info("registration.duplicate", slug=event.slug, email=email)
            raise ConflictError(event.conflict_message)

    try:
        row = await store.insert_one(event.table, record)
    except StoreError as e:
        log.error("registration.insert_failed", slug=event.slug, code=e.code, error=e.message)
        raise classify_store_error(e, event.conflict_message) from e

    registration_id = display_registration_id(event, row)
    log.info("registration.submitted", slug=event.slug, registration_id=registration_id)
    return RegistrationReceipt(registration_id=registration_id, record=row)


async def lookup_registration(store, event: EventDefinition, email: Optional[str]) -> RegistrationLookup:
    """
    Finds the registration of ``email`` for pre-filling dependent forms.

    :raises ValidationError: The email is empty or malformed.
    :raises RecordLookupError: 404 when nothing matches, 502 when the query fails.
    """
    email = event.normalize_email(email)
    if not is_valid_email(email):
        raise ValidationError("Please enter a registered email ID first.")
    require_store(store)

    try:
        row = await store.select_one(event.table, {event.email_column: email})
    except StoreError as e:
        log.error("registration.lookup_failed", slug=event.slug, error=e.message)
        raise RecordLookupError("Error checking registration. Please try again.", status_code=502) from e

    if not row:
        log.info("registration.lookup_miss", slug=event.slug, email=email)
        raise RecordLookupError("Email not registered. Please check your registration.")

    return RegistrationLookup(
        registration_id=display_registration_id(event, row),
        full_name=row.get(event.name_column),
        category=row.get(event.category_column) if event.category_column else None,
        record=row,
    )
