import hmac
import structlog

from typing import Optional

from core.config import settings
from core.session import SessionStore


log = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials. Please contact developer."


class AdminGate:
    """
    Fixed credential check in front of the admin screens.

    The flag it sets only decides whether the admin UI renders; the store's
    own policies protect the data.
    """

    def __init__(self, sessions: SessionStore, email: Optional[str] = None, password: Optional[str] = None):
        self.sessions = sessions
        self.email = settings.ADMIN_EMAIL if email is None else email
        self.password = settings.ADMIN_PASSWORD if password is None else password

    def check(self, identifier: str, secret: str) -> bool:
        if not self.email or not self.password:
            log.warning("admin.credentials_not_configured")
            return False
        email_ok = hmac.compare_digest((identifier or "").encode(), self.email.encode())
        password_ok = hmac.compare_digest((secret or "").encode(), self.password.encode())
        return email_ok and password_ok

    async def login(self, session_id: str, identifier: str, secret: str) -> bool:
        if not self.check(identifier, secret):
            log.info("admin.login_failed", identifier=identifier)
            return False
        await self.sessions.set_admin(session_id)
        log.info("admin.login", identifier=identifier)
        return True

    async def logout(self, session_id: str):
        await self.sessions.clear_admin(session_id)
        log.info("admin.logout")

    async def is_authenticated(self, session_id: str) -> bool:
        return await self.sessions.is_admin(session_id)
