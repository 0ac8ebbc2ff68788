# api/participants.py
from fastapi import APIRouter, Depends, Header
from typing import Optional

from models.achievement_schemas import AchievementListResponse
from models.schemas import ParticipantCreate, ParticipantLogin, SessionResponse
from models.weight_schemas import WeightHistoryResponse
from services.mappers import achievement_to_response, weight_entry_to_response
from services.participant_service import get_participant_service
from services.session_service import ParticipantSession, get_session_service
from services.supabase_service import get_supabase_service
from utils.timezone_utils import get_timezone_offset, get_user_today

router = APIRouter()

def current_participant(x_session_token: Optional[str] = Header(None)) -> ParticipantSession:
    """Resolve the X-Session-Token header to an open participant session"""
    return get_session_service().restore_participant(x_session_token)

@router.post("/register", response_model=SessionResponse)
async def register_participant(data: ParticipantCreate, tz_offset: int = Depends(get_timezone_offset)):
    """Register a new participant and open a session"""
    print(f"🔍 Registering participant: {data.mobile}")

    today = get_user_today(tz_offset)
    participant_service = get_participant_service()

    user = await participant_service.register(
        data.mobile, data.name, data.start_weight, data.target_weight, today
    )
    session = get_session_service().open_participant_session(user)
    profile = await participant_service.get_profile(user['id'], today)

    return SessionResponse(
        success=True,
        token=session.token,
        user=profile,
        message="Welcome to the 21-day challenge!"
    )

@router.post("/login", response_model=SessionResponse)
async def login_participant(data: ParticipantLogin, tz_offset: int = Depends(get_timezone_offset)):
    """Log in with a registered mobile number"""
    print(f"🔍 Login attempt for: {data.mobile}")

    session = await get_session_service().login_participant(data.mobile)
    profile = await get_participant_service().get_profile(session.user_id, get_user_today(tz_offset))

    return SessionResponse(
        success=True,
        token=session.token,
        user=profile,
        message=f"Welcome back, {profile.name}!"
    )

@router.get("/session", response_model=SessionResponse)
async def restore_session(
    session: ParticipantSession = Depends(current_participant),
    tz_offset: int = Depends(get_timezone_offset)
):
    """Reload the participant snapshot for an existing session"""
    profile = await get_participant_service().get_profile(session.user_id, get_user_today(tz_offset))
    return SessionResponse(success=True, token=session.token, user=profile)

@router.post("/logout")
async def logout_participant(x_session_token: Optional[str] = Header(None)):
    closed = get_session_service().logout_participant(x_session_token)
    return {"success": True, "closed": closed}

@router.get("/me/weight-history", response_model=WeightHistoryResponse)
async def get_my_weight_history(session: ParticipantSession = Depends(current_participant)):
    entries = await get_supabase_service().get_weight_history(session.user_id)
    weights = [weight_entry_to_response(entry) for entry in entries]
    return WeightHistoryResponse(weights=weights, total_entries=len(weights))

@router.get("/me/achievements", response_model=AchievementListResponse)
async def get_my_achievements(session: ParticipantSession = Depends(current_participant)):
    rows = await get_supabase_service().get_achievements(session.user_id)
    return AchievementListResponse(achievements=[achievement_to_response(row) for row in rows])
