# auth/session.py
import logging
import datetime as dt
from typing import Dict, Optional

from Connections.api_client import ComplaintsApi
from Models.dashboard_state import AdminDashboard
from Schemas.admin_schemas import Role
from auth.security import SESSION_HOURS, new_session_id

logger = logging.getLogger(__name__)


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class AdminSession:
    """A logged-in back-office user: API bearer token, role and their dashboard."""

    def __init__(self, sid: str, token: str, role: Optional[str], api: ComplaintsApi,
                 username: Optional[str] = None):
        self.sid = sid
        self.token = token
        self.role = role
        self.username = username
        self.api = api.authorized(token)
        self.dashboard = AdminDashboard(self.api, role)
        # same lifetime as the session JWT
        self.expires_at = _now() + dt.timedelta(hours=SESSION_HOURS)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def expired(self) -> bool:
        return _now() >= self.expires_at


class SessionStore:
    def __init__(self):
        self._sessions: Dict[str, AdminSession] = {}

    def create(self, token: str, role: Optional[str], api: ComplaintsApi,
               username: Optional[str] = None) -> AdminSession:
        self.prune()
        session = AdminSession(new_session_id(), token, role, api, username=username)
        self._sessions[session.sid] = session
        logger.info("Session opened for %s (%s)", username or "?", role)
        return session

    def get(self, sid: Optional[str]) -> Optional[AdminSession]:
        self.prune()
        if not sid:
            return None
        return self._sessions.get(sid)

    def drop(self, sid: str) -> bool:
        session = self._sessions.pop(sid, None)
        if session is not None:
            logger.info("Session closed for %s", session.username or "?")
        return session is not None

    def prune(self) -> int:
        """Forget sessions past their expiry; returns how many were dropped."""
        expired = [sid for sid, s in self._sessions.items() if s.expired]
        for sid in expired:
            session = self._sessions.pop(sid)
            logger.info("Session expired for %s", session.username or "?")
        return len(expired)

    def __len__(self):
        return len(self._sessions)
