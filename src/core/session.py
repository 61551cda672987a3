import secrets
import structlog

from typing import Optional

from fastapi import Request, Response
from redis.asyncio import Redis
from redis.exceptions import RedisError

from .config import settings
from .errors import SessionUnavailableError


log = structlog.get_logger()

redis = Redis.from_url(
    settings.REDIS_URL,
    encoding="utf-8",
    decode_responses=True
)


class SessionStore:
    """
    Per-visitor state kept in redis under the session cookie: the admin flag
    and the contest flow of each event. The admin flag lives until logout,
    flow state expires after ``CONTEST_FLOW_TTL`` seconds.

    Redis failures are raised as ``SessionUnavailableError``.
    """

    def __init__(self, client, flow_ttl: Optional[int] = None):
        self.redis = client
        self.flow_ttl = settings.CONTEST_FLOW_TTL if flow_ttl is None else flow_ttl

    @staticmethod
    def _admin_key(session_id: str) -> str:
        return f"session:{session_id}:admin"

    @staticmethod
    def _flow_key(session_id: str, slug: str) -> str:
        return f"session:{session_id}:flow:{slug}"

    async def _call(self, op: str, command, *args, **kwargs):
        try:
            return await command(*args, **kwargs)
        except RedisError as e:
            log.error("session.redis_error", op=op, error=str(e))
            raise SessionUnavailableError() from e

    async def is_admin(self, session_id: str) -> bool:
        return await self._call("is_admin", self.redis.get, self._admin_key(session_id)) == "true"

    async def set_admin(self, session_id: str):
        await self._call("set_admin", self.redis.set, self._admin_key(session_id), "true")

    async def clear_admin(self, session_id: str):
        await self._call("clear_admin", self.redis.delete, self._admin_key(session_id))

    async def load_flow(self, session_id: str, slug: str) -> Optional[str]:
        return await self._call("load_flow", self.redis.get, self._flow_key(session_id, slug))

    async def save_flow(self, session_id: str, slug: str, raw: str):
        await self._call("save_flow", self.redis.set, self._flow_key(session_id, slug), raw, ex=self.flow_ttl)


def get_session_store() -> SessionStore:
    return SessionStore(redis)


async def get_session_id(request: Request, response: Response) -> str:
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        session_id = secrets.token_urlsafe(24)
        response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            session_id,
            httponly=True,
            samesite="lax",
        )
        log.debug("session.created")
    return session_id
