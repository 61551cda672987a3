import structlog

from fastapi import APIRouter, Depends, HTTPException, Response

from core.events import EventDefinition
from core.errors import RegistrationError, SessionUnavailableError
from core.session import SessionStore, get_session_id, get_session_store
from core.store import get_store
from routes.registrations import error_status, event_or_404
from schemas.submission import ContestEmailRequest, ContestLinksRequest, ContestResponse
from services.contest import ContestFlow, ContestFlowState


log = structlog.get_logger()
router = APIRouter(prefix="/api/events/{slug}/submission")


def contest_event(event: EventDefinition = Depends(event_or_404)) -> EventDefinition:
    if not event.submissions:
        raise HTTPException(404, "This event does not accept contest submissions")
    return event


class ContestSession:
    """One visitor's flow for one event, loaded from and saved to the session store."""

    def __init__(self, event: EventDefinition, session_id: str, sessions: SessionStore, store):
        self.event = event
        self.session_id = session_id
        self.sessions = sessions
        self.store = store

    async def load(self) -> ContestFlow:
        raw = await self.sessions.load_flow(self.session_id, self.event.slug)
        state = ContestFlowState.model_validate_json(raw) if raw else None
        return ContestFlow(self.store, self.event, state)

    async def save(self, flow: ContestFlow):
        await self.sessions.save_flow(self.session_id, self.event.slug, flow.state.model_dump_json())


def contest_session(
    event: EventDefinition = Depends(contest_event),
    session_id: str = Depends(get_session_id),
    sessions: SessionStore = Depends(get_session_store),
    store=Depends(get_store),
) -> ContestSession:
    return ContestSession(event, session_id, sessions, store)


def flow_response(flow: ContestFlow, status: str, message: str) -> ContestResponse:
    return ContestResponse(status=status, message=message, step=flow.step.value, form=flow.form())


async def run_step(ctx: ContestSession, response: Response, step, recorded: bool = False) -> ContestResponse:
    """
    Loads the flow, applies ``step`` and saves the resulting state.

    Failed steps keep the state with the entered values. When ``recorded`` is
    set a successful step has already written to the store, so a failed save
    is only logged.
    """
    flow = ContestFlow(ctx.store, ctx.event)
    try:
        flow = await ctx.load()
    except SessionUnavailableError as e:
        error_status(response, e)
        return flow_response(flow, "error", e.message)

    try:
        message = await step(flow)
        result = flow_response(flow, "success" if message else "info", message or "")
    except RegistrationError as e:
        error_status(response, e)
        result = flow_response(flow, "error", e.message)

    try:
        await ctx.save(flow)
    except SessionUnavailableError as e:
        if recorded and result.status == "success":
            log.warning("contest.state_not_saved", slug=ctx.event.slug)
            return result
        error_status(response, e)
        return flow_response(flow, "error", e.message)
    return result


@router.get("", response_model=ContestResponse)
async def current_state(response: Response, ctx: ContestSession = Depends(contest_session)):
    try:
        flow = await ctx.load()
    except SessionUnavailableError as e:
        error_status(response, e)
        return flow_response(ContestFlow(ctx.store, ctx.event), "error", e.message)
    return flow_response(flow, "info", "")


@router.post("/verify", response_model=ContestResponse)
async def verify_email(data: ContestEmailRequest, response: Response,
                       ctx: ContestSession = Depends(contest_session)):
    async def step(flow: ContestFlow):
        return await flow.verify_email(data.emailId)

    return await run_step(ctx, response, step)


@router.post("/links", response_model=ContestResponse)
async def submit_links(data: ContestLinksRequest, response: Response,
                       ctx: ContestSession = Depends(contest_session)):
    async def step(flow: ContestFlow):
        return await flow.submit_links(data.driveLink, data.instagramLink)

    return await run_step(ctx, response, step, recorded=True)


@router.post("/back", response_model=ContestResponse)
async def go_back(response: Response, ctx: ContestSession = Depends(contest_session)):
    async def step(flow: ContestFlow):
        flow.go_back()

    return await run_step(ctx, response, step)
