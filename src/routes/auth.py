from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm
from core.errors import SessionUnavailableError
from core.session import SessionStore, get_session_id, get_session_store
from schemas.user import SessionResponse
from services.auth import AdminGate, INVALID_CREDENTIALS

router = APIRouter(prefix="/api/auth")


def get_admin_gate(sessions: SessionStore = Depends(get_session_store)) -> AdminGate:
    return AdminGate(sessions)

# Admin login: fixed credential pair, flag kept in the visitor session
@router.post("/login", response_model=SessionResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session_id: str = Depends(get_session_id),
    gate: AdminGate = Depends(get_admin_gate),
):
    try:
        ok = await gate.login(session_id, form_data.username, form_data.password)
    except SessionUnavailableError as e:
        raise HTTPException(e.status_code, e.message)
    if not ok:
        raise HTTPException(401, INVALID_CREDENTIALS)
    return SessionResponse(authenticated=True, redirect="/admin")

@router.post("/logout", response_model=SessionResponse)
async def logout(
    session_id: str = Depends(get_session_id),
    gate: AdminGate = Depends(get_admin_gate),
):
    try:
        await gate.logout(session_id)
    except SessionUnavailableError as e:
        raise HTTPException(e.status_code, e.message)
    return SessionResponse(authenticated=False, redirect="/admin/login")

@router.get("/session", response_model=SessionResponse)
async def session_status(
    session_id: str = Depends(get_session_id),
    gate: AdminGate = Depends(get_admin_gate),
):
    try:
        authenticated = await gate.is_authenticated(session_id)
    except SessionUnavailableError as e:
        raise HTTPException(e.status_code, e.message)
    return SessionResponse(authenticated=authenticated)
