# services/session_service.py
"""
Participant and admin sessions.

A session is created on login (or registration), removed on logout, and
otherwise never expires. Clients hold the opaque token and send it back;
``restore_*`` is the only way to pick a session up again, e.g. when the app
relaunches.

The admin gate is a single configured mobile number compared as-is. It is not
a security boundary.
"""
import os
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from services.errors import AccessDenied, ParticipantNotFound, ValidationError
from services.supabase_service import SupabaseService, get_supabase_service
from services.validation import validate_mobile

DEFAULT_ADMIN_MOBILE = '9929785595'


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ParticipantSession:
    token: str
    user_id: str
    mobile: str
    created_at: str = field(default_factory=_now)


@dataclass
class AdminSession:
    token: str
    id: str
    mobile: str
    name: str
    created_at: str = field(default_factory=_now)


class SessionService:
    def __init__(self, supabase_service: Optional[SupabaseService] = None, admin_mobile: Optional[str] = None):
        self.supabase_service = supabase_service or get_supabase_service()
        self.admin_mobile = admin_mobile or os.getenv("ADMIN_MOBILE", DEFAULT_ADMIN_MOBILE)
        self._participants: Dict[str, ParticipantSession] = {}
        self._admins: Dict[str, AdminSession] = {}

    # Participants
    def open_participant_session(self, user: Dict) -> ParticipantSession:
        session = ParticipantSession(
            token=secrets.token_urlsafe(32),
            user_id=str(user['id']),
            mobile=str(user['mobile']),
        )
        self._participants[session.token] = session
        print(f"✅ Session opened for user {session.user_id}")
        return session

    async def login_participant(self, mobile: str) -> ParticipantSession:
        """Open a session for a registered mobile number"""
        if not validate_mobile(mobile):
            raise ValidationError("Please enter a valid 10-digit mobile number")

        user = await self.supabase_service.get_user_by_mobile(mobile)
        if not user:
            raise ParticipantNotFound("Mobile number not registered")
        return self.open_participant_session(user)

    def restore_participant(self, token: Optional[str]) -> ParticipantSession:
        session = self._participants.get(token) if token else None
        if session is None:
            raise AccessDenied("Session not found, please log in again")
        return session

    def logout_participant(self, token: Optional[str]) -> bool:
        session = self._participants.pop(token, None) if token else None
        if session:
            print(f"✅ Session closed for user {session.user_id}")
        return session is not None

    def drop_user_sessions(self, user_id: str) -> int:
        """Forget every session of a deleted participant"""
        tokens = [t for t, s in self._participants.items() if s.user_id == str(user_id)]
        for token in tokens:
            del self._participants[token]
        return len(tokens)

    def drop_all_participant_sessions(self) -> None:
        self._participants.clear()

    # Admin
    def login_admin(self, mobile: str) -> AdminSession:
        print(f"🔍 Attempting admin login for mobile: {mobile}")

        if mobile != self.admin_mobile:
            print(f"❌ Not an admin mobile number: {mobile}")
            raise AccessDenied()

        session = AdminSession(
            token=secrets.token_urlsafe(32),
            id='admin-user-id',
            mobile=self.admin_mobile,
            name='Admin User',
        )
        self._admins[session.token] = session
        print("✅ Admin login successful")
        return session

    def restore_admin(self, token: Optional[str]) -> AdminSession:
        session = self._admins.get(token) if token else None
        if session is None:
            raise AccessDenied("Admin access required")
        return session

    def logout_admin(self, token: Optional[str]) -> bool:
        return (self._admins.pop(token, None) if token else None) is not None


# Global instance - initialized in main.py
session_service = None

def get_session_service() -> SessionService:
    """Get the global session service instance"""
    global session_service
    if session_service is None:
        session_service = SessionService()
    return session_service

def init_session_service(supabase_service: Optional[SupabaseService] = None,
                         admin_mobile: Optional[str] = None) -> SessionService:
    """Initialize the global session service"""
    global session_service
    session_service = SessionService(supabase_service, admin_mobile)
    return session_service
