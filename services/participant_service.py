# services/participant_service.py
from datetime import date
from typing import Any, Dict, List, Optional

from models.schemas import ParticipantResponse
from services.errors import ParticipantNotFound, PersistenceFailure, ValidationError
from services.mappers import participant_to_response
from services.supabase_service import SupabaseService, get_supabase_service
from services.validation import sanitize_name, validate_participant_update, validate_registration


class ParticipantService:
    def __init__(self, supabase_service: Optional[SupabaseService] = None):
        self.supabase_service = supabase_service or get_supabase_service()

    async def register(self, mobile: str, name: str, start_weight: float,
                       target_weight: float, today: date) -> Dict[str, Any]:
        """
        Create a participant and the seed weight entry for the join day.

        If the seed entry cannot be written the participant row is removed
        again, so a failed registration leaves nothing behind.
        """
        validate_registration(mobile, name, start_weight, target_weight)

        user = await self.supabase_service.create_user({
            'mobile': mobile,
            'name': sanitize_name(name),
            'start_weight': start_weight,
            'target_weight': target_weight,
        })

        try:
            await self.supabase_service.create_weight_entry(user['id'], start_weight, today)
        except PersistenceFailure:
            await self._remove_user(user['id'])
            raise

        # The seed entry fires the points trigger
        return await self.supabase_service.get_user_by_id(user['id']) or user

    async def _remove_user(self, user_id: str) -> None:
        print(f"⚠️ Seed weight entry failed, removing user {user_id}")
        try:
            await self.supabase_service.delete_user(user_id)
        except PersistenceFailure as e:
            # The seed failure is the error the caller needs to see
            print(f"❌ Could not remove user {user_id} after failed registration, row left behind: {e.message}")

    async def get_profile(self, user_id: str, today: date) -> ParticipantResponse:
        """Participant view with achievements and weight history"""
        user = await self.supabase_service.get_user_by_id(user_id)
        if not user:
            raise ParticipantNotFound()
        achievements = await self.supabase_service.get_achievements(user_id)
        history = await self.supabase_service.get_weight_history(user_id)
        return participant_to_response(user, achievements, history, today)

    # Admin operations
    async def list_users(self) -> List[Dict[str, Any]]:
        """All participants, newest first"""
        return await self.supabase_service.get_all_users(order_by='created_at', desc=True)

    async def update_user(self, user_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
        update_data = {k: v for k, v in update_data.items() if v is not None}
        if not update_data:
            raise ValidationError("Nothing to update")

        cleaned = validate_participant_update(update_data)
        print(f"🔍 Updating user {user_id}: {cleaned}")

        updated = await self.supabase_service.update_user(user_id, cleaned)
        if not updated:
            raise ParticipantNotFound()
        print(f"✅ User updated successfully: {user_id}")
        return updated

    async def delete_user(self, user_id: str) -> None:
        if not await self.supabase_service.delete_user(user_id):
            raise ParticipantNotFound()

    async def get_weight_entries(self, user_id: str) -> List[Dict[str, Any]]:
        if not await self.supabase_service.get_user_by_id(user_id):
            raise ParticipantNotFound()
        return await self.supabase_service.get_weight_history(user_id)

    async def delete_weight_entry(self, entry_id: str) -> None:
        if not await self.supabase_service.delete_weight_entry(entry_id):
            raise ParticipantNotFound("Weight entry not found")

    async def reset_all_data(self) -> None:
        await self.supabase_service.reset_all_data()


def get_participant_service() -> ParticipantService:
    return ParticipantService(get_supabase_service())
