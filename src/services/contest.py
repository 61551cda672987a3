"""
Two step contest entry: verify the email, then submit the video and post links.

``ContestFlow`` holds one visitor's state. It moves to ``awaiting_links`` only
after the email has a registration and no submission yet, and it goes back to
``awaiting_email`` after a successful submission or an explicit go back.
Failures leave the state where it was, keeping the entered values.
"""
import structlog

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from core.events import EventDefinition
from core.errors import (
    ConflictError,
    RecordLookupError,
    StoreError,
    ValidationError,
    classify_store_error,
)
from models.registration import ContestSubmission
from services.registrations import require_store
from utils.validation import is_valid_email, link_error


log = structlog.get_logger()

DRIVE_DOMAIN = "drive.google.com"
INSTAGRAM_DOMAIN = "instagram.com"


class ContestStep(str, Enum):
    AWAITING_EMAIL = "awaiting_email"
    AWAITING_LINKS = "awaiting_links"


class ContestFlowState(BaseModel):
    step: ContestStep = ContestStep.AWAITING_EMAIL
    emailId: str = ""
    driveLink: str = ""
    instagramLink: str = ""


class ContestFlow:

    def __init__(self, store, event: EventDefinition, state: Optional[ContestFlowState] = None):
        self.store = store
        self.event = event
        self.state = state or ContestFlowState()

    @property
    def step(self) -> ContestStep:
        return self.state.step

    def form(self) -> dict:
        return self.state.model_dump(exclude={"step"})

    async def verify_email(self, email: Optional[str]) -> str:
        if self.step != ContestStep.AWAITING_EMAIL:
            self.go_back()
        email = self.event.normalize_email(email)
        self.state.emailId = email
        if not is_valid_email(email):
            raise ValidationError("Please enter a valid email address.")
        store = require_store(self.store)
        submissions = self.event.submissions

        try:
            registration = await store.select_one(self.event.table, {self.event.email_column: email})
        except StoreError as e:
            raise RecordLookupError("Error checking email.", status_code=502) from e
        if not registration:
            raise RecordLookupError("Email not found. Please register first.")

        try:
            existing = await store.select_one(submissions.table, {"email_id": email}, columns="id")
        except StoreError as e:
            raise RecordLookupError("Error checking email.", status_code=502) from e
        if existing:
            raise ConflictError(submissions.conflict_message)

        self.state.step = ContestStep.AWAITING_LINKS
        log.info("contest.verified", slug=self.event.slug, email=email)
        return "Email verified. Please enter your links."

    async def submit_links(self, drive_link: Optional[str], instagram_link: Optional[str]) -> str:
        if self.step != ContestStep.AWAITING_LINKS:
            raise ValidationError("Please verify your email first.")

        self.state.driveLink = (drive_link or "").strip()
        self.state.instagramLink = (instagram_link or "").strip()

        message = (
            link_error(self.state.driveLink, DRIVE_DOMAIN, "Please provide a valid Google Drive link.")
            or link_error(self.state.instagramLink, INSTAGRAM_DOMAIN, "Please provide a valid Instagram post link.")
        )
        if message:
            raise ValidationError(message)

        store = require_store(self.store)
        submissions = self.event.submissions

        try:
            existing = await store.select_one(submissions.table, {"email_id": self.state.emailId}, columns="id")
        except StoreError as e:
            raise classify_store_error(e, submissions.conflict_message) from e
        if existing:
            raise ConflictError(submissions.conflict_message)

        record = ContestSubmission(
            email_id=self.state.emailId,
            drive_link=self.state.driveLink,
            instagram_link=self.state.instagramLink,
        )
        try:
            await store.insert_one(submissions.table, record.model_dump(mode="json"))
        except StoreError as e:
            log.error("contest.insert_failed", slug=self.event.slug, code=e.code, error=e.message)
            raise classify_store_error(e, submissions.conflict_message) from e

        log.info("contest.submitted", slug=self.event.slug, email=self.state.emailId)
        self.state = ContestFlowState()
        return "Video & Verification link submitted successfully! Good luck!"

    def go_back(self):
        self.state.step = ContestStep.AWAITING_EMAIL
