import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from typing import Any, List
from core.events import EventDefinition
from core.errors import RegistrationError, SessionUnavailableError
from core.session import get_session_id
from core.store import get_store
from routes.auth import get_admin_gate
from routes.registrations import event_or_404
from schemas.user import AdminPanel
from services import admin as admin_svc
from services.auth import AdminGate


log = structlog.get_logger()
router = APIRouter(prefix="/api/admin")

# Admin guard
async def admin_required(
    session_id: str = Depends(get_session_id),
    gate: AdminGate = Depends(get_admin_gate),
):
    try:
        authenticated = await gate.is_authenticated(session_id)
    except SessionUnavailableError as e:
        raise HTTPException(e.status_code, e.message)
    if not authenticated:
        raise HTTPException(401, "Admin login required")
    return session_id

@router.get("/panels", dependencies=[Depends(admin_required)], response_model=List[AdminPanel])
async def list_panels():
    return admin_svc.admin_panels()

@router.get("/events/{slug}/registrations", dependencies=[Depends(admin_required)], response_model=Any)
async def list_registrations(
    event: EventDefinition = Depends(event_or_404),
    q: str = Query("", description="Case-insensitive search over the listed fields"),
    store=Depends(get_store),
) -> Any:
    try:
        rows = await admin_svc.list_registrations(store, event, q)
    except RegistrationError as e:
        raise HTTPException(e.status_code, e.message)
    return {"data": rows, "total": len(rows), "search": q}

@router.get("/events/{slug}/registrations/export", dependencies=[Depends(admin_required)],
            response_class=StreamingResponse)
async def export_registrations(
    event: EventDefinition = Depends(event_or_404),
    q: str = Query(""),
    store=Depends(get_store),
):
    try:
        rows = await admin_svc.list_registrations(store, event, q)
    except RegistrationError as e:
        raise HTTPException(e.status_code, e.message)

    columns = list(event.export_columns)
    if event.submissions:
        columns.append("has_submission")

    headers = {
        "Content-Disposition": f'attachment; filename="{event.slug}-registrations.csv"',
        "Content-Type": "text/csv; charset=utf-8"
    }
    log.info("registrations-exported", slug=event.slug, search=q, rows=len(rows))
    return StreamingResponse(admin_svc.csv_rows(rows, columns), headers=headers)

@router.get("/events/{slug}/submissions", dependencies=[Depends(admin_required)], response_model=Any)
async def list_submissions(
    event: EventDefinition = Depends(event_or_404),
    q: str = Query(""),
    store=Depends(get_store),
) -> Any:
    if not event.submissions:
        raise HTTPException(404, "This event has no contest submissions")
    try:
        rows = await admin_svc.list_submissions(store, event, q)
    except RegistrationError as e:
        raise HTTPException(e.status_code, e.message)
    return {"data": rows, "total": len(rows), "search": q}

@router.get("/events/{slug}/uploads", dependencies=[Depends(admin_required)], response_model=Any)
async def list_uploads(
    event: EventDefinition = Depends(event_or_404),
    q: str = Query(""),
    store=Depends(get_store),
) -> Any:
    """ Project uploads with their public file links."""
    if not event.uploads:
        raise HTTPException(404, "This event has no project uploads")
    try:
        rows = await admin_svc.list_uploads(store, event, q)
    except RegistrationError as e:
        raise HTTPException(e.status_code, e.message)
    return {"data": rows, "total": len(rows), "search": q}
