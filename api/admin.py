# api/admin.py
from fastapi import APIRouter, Depends, Header
from typing import List, Optional

from models.schemas import (
    AdminLogin,
    AdminSessionResponse,
    AdminStatsResponse,
    AdminUser,
    AdminUserRow,
    AdminUserUpdate,
)
from models.weight_schemas import WeightEntryResponse
from services.leaderboard import admin_statistics
from services.mappers import admin_user_to_response, weight_entry_to_response
from services.participant_service import get_participant_service
from services.session_service import AdminSession, get_session_service

router = APIRouter(prefix="/admin", tags=["admin"])

def require_admin(x_admin_token: Optional[str] = Header(None)) -> AdminSession:
    """Require an open admin session (X-Admin-Token header)"""
    return get_session_service().restore_admin(x_admin_token)

@router.post("/login", response_model=AdminSessionResponse)
async def admin_login(data: AdminLogin):
    session = get_session_service().login_admin(data.mobile)
    return AdminSessionResponse(
        success=True,
        token=session.token,
        admin=AdminUser(id=session.id, mobile=session.mobile, name=session.name, created_at=session.created_at),
        message="Admin login successful"
    )

@router.post("/logout")
async def admin_logout(x_admin_token: Optional[str] = Header(None)):
    return {"success": True, "closed": get_session_service().logout_admin(x_admin_token)}

@router.get("/users", response_model=List[AdminUserRow])
async def list_users(admin: AdminSession = Depends(require_admin)):
    users = await get_participant_service().list_users()
    return [admin_user_to_response(user) for user in users]

@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(admin: AdminSession = Depends(require_admin)):
    users = await get_participant_service().list_users()
    return AdminStatsResponse(**admin_statistics(users))

@router.put("/users/{user_id}", response_model=AdminUserRow)
async def update_user(user_id: str, user_data: AdminUserUpdate, admin: AdminSession = Depends(require_admin)):
    updated = await get_participant_service().update_user(user_id, user_data.model_dump())
    return admin_user_to_response(updated)

@router.delete("/users/{user_id}")
async def delete_user(user_id: str, admin: AdminSession = Depends(require_admin)):
    """Delete a participant with their weight history and achievements"""
    print(f"🔍 Deleting user: {user_id}")
    await get_participant_service().delete_user(user_id)
    get_session_service().drop_user_sessions(user_id)
    return {"success": True, "message": "User deleted successfully"}

@router.get("/users/{user_id}/weight-entries", response_model=List[WeightEntryResponse])
async def get_weight_entries(user_id: str, admin: AdminSession = Depends(require_admin)):
    entries = await get_participant_service().get_weight_entries(user_id)
    return [weight_entry_to_response(entry) for entry in entries]

@router.delete("/weight-entries/{entry_id}")
async def delete_weight_entry(entry_id: str, admin: AdminSession = Depends(require_admin)):
    print(f"🔍 Deleting weight entry: {entry_id}")
    await get_participant_service().delete_weight_entry(entry_id)
    return {"success": True, "message": "Weight entry deleted successfully"}

@router.post("/reset")
async def reset_all_data(admin: AdminSession = Depends(require_admin)):
    """Wipe every participant, weight entry and achievement"""
    await get_participant_service().reset_all_data()
    get_session_service().drop_all_participant_sessions()
    return {"success": True, "message": "All data has been reset"}
