import structlog

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Path, Query, Response, UploadFile

from core.events import EVENTS, EventDefinition, get_event, is_registration_open
from core.errors import RegistrationError
from core.store import get_store
from schemas.registration import EventOut, FormResponse, LookupResponse
from schemas.submission import ProjectUploadResponse
from services.registrations import lookup_registration, submit_registration
from services.uploads import FileUpload, submit_project


log = structlog.get_logger()
router = APIRouter(prefix="/api/events")


def event_or_404(slug: str = Path(..., description="Event slug")) -> EventDefinition:
    event = get_event(slug)
    if not event:
        raise HTTPException(404, "Event not found")
    return event


def error_status(response: Response, err: RegistrationError):
    response.status_code = err.status_code
    log.info("form.rejected", error=type(err).__name__, status=err.status_code, message=err.message)


def event_out(event: EventDefinition) -> EventOut:
    return EventOut(
        slug=event.slug,
        title=event.title,
        registrationOpen=is_registration_open(event),
        registrationStart=event.registration_start.isoformat() if event.registration_start else None,
        registrationEnd=event.registration_end.isoformat() if event.registration_end else None,
        acceptsProjects=event.uploads is not None,
        acceptsSubmissions=event.submissions is not None,
        options=event.form.options,
    )


@router.get("", response_model=list[EventOut])
async def list_events():
    return [event_out(e) for e in EVENTS.values()]


@router.get("/{slug}", response_model=EventOut)
async def get_event_details(event: EventDefinition = Depends(event_or_404)):
    return event_out(event)


def registration_endpoint(event: EventDefinition):
    form_cls = event.form

    async def register(response: Response, data: Dict[str, Any] = Body(...), store=Depends(get_store)):
        try:
            receipt = await submit_registration(store, event, data)
        except RegistrationError as e:
            error_status(response, e)
            return FormResponse(status="error", message=e.message, form=form_cls.echo(data))

        return FormResponse(
            status="success",
            message=event.success_message,
            form=form_cls.blank(),
            registrationId=receipt.registration_id,
            data=receipt.record,
        )

    register.__name__ = f"register_{event.slug.replace('-', '_')}"
    return register


for _event in EVENTS.values():
    router.add_api_route(
        f"/{_event.slug}/registrations",
        registration_endpoint(_event),
        methods=["POST"],
        response_model=FormResponse,
        status_code=201,
    )


@router.get("/{slug}/lookup", response_model=LookupResponse)
async def lookup(
    event: EventDefinition = Depends(event_or_404),
    email: str = Query(""),
    store=Depends(get_store),
):
    try:
        found = await lookup_registration(store, event, email)
    except RegistrationError as e:
        raise HTTPException(e.status_code, e.message)

    return LookupResponse(
        registrationId=found.registration_id,
        fullName=found.full_name,
        category=found.category,
        message=f"Welcome, {found.full_name}!",
    )


@router.post("/{slug}/projects", response_model=ProjectUploadResponse, status_code=201)
async def upload_project(
    response: Response,
    event: EventDefinition = Depends(event_or_404),
    emailId: str = Form(""),
    file: Optional[UploadFile] = File(None),
    store=Depends(get_store),
):
    if not event.uploads:
        raise HTTPException(404, "This event does not accept project uploads")

    upload = None
    if file is not None and file.filename:
        upload = FileUpload(filename=file.filename, content_type=file.content_type, data=await file.read())

    try:
        receipt = await submit_project(store, event, emailId, upload)
    except RegistrationError as e:
        error_status(response, e)
        return ProjectUploadResponse(status="error", message=e.message, form={"emailId": emailId})

    return ProjectUploadResponse(
        status="success",
        message="Project uploaded successfully!",
        form={"emailId": ""},
        registrationId=receipt.registration_id,
        filePath=receipt.file_path,
        fileUrl=receipt.file_url,
    )
