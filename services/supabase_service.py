# services/supabase_service.py
from supabase import create_client, Client
import os
from typing import Dict, List, Optional, Any
from datetime import datetime, date, timezone

from services.errors import DuplicateRegistration, PersistenceFailure

UNIQUE_VIOLATION = '23505'

# PostgREST refuses an unfiltered DELETE, so bulk deletes filter on an id
# that can never exist
NIL_UUID = '00000000-0000-0000-0000-000000000000'


def _error_code(error: Exception) -> Optional[str]:
    code = getattr(error, 'code', None)
    if code is None and error.args and isinstance(error.args[0], dict):
        code = error.args[0].get('code')
    return str(code) if code is not None else None


class SupabaseService:
    def __init__(self, client: Optional[Client] = None):
        if client is None:
            url = os.getenv("SUPABASE_URL")
            key = os.getenv("SUPABASE_SERVICE_KEY")

            if not url or not key:
                raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set in environment variables")

            client = create_client(url, key)

        self.client: Client = client
        print("✅ Supabase client initialized")

    # Participant operations
    async def get_user_by_mobile(self, mobile: str) -> Optional[Dict[str, Any]]:
        """Get participant by mobile number"""
        try:
            print(f"🔍 Getting user by mobile: {mobile}")

            response = self.client.table('users')\
                .select('*')\
                .eq('mobile', mobile)\
                .limit(1)\
                .execute()

            if response.data:
                print(f"✅ User found by mobile: {mobile}")
                return response.data[0]
            print(f"❌ User not found by mobile: {mobile}")
            return None

        except Exception as e:
            print(f"❌ Error fetching user by mobile: {e}")
            raise PersistenceFailure("Failed to fetch user data", e)

    async def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get participant by ID"""
        try:
            response = self.client.table('users')\
                .select('*')\
                .eq('id', user_id)\
                .limit(1)\
                .execute()

            return response.data[0] if response.data else None

        except Exception as e:
            print(f"❌ Supabase fetch error: {str(e)}")
            raise PersistenceFailure("Failed to fetch user data", e)

    async def create_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a participant row; current weight starts at the start weight"""
        try:
            print(f"🔍 Creating user in Supabase: {user_data.get('mobile')}")

            row = {
                'mobile': user_data['mobile'],
                'name': user_data['name'],
                'start_weight': user_data['start_weight'],
                'current_weight': user_data['start_weight'],
                'target_weight': user_data['target_weight'],
            }
            response = self.client.table('users').insert(row).execute()

        except Exception as e:
            print(f"❌ Error creating user in Supabase: {e}")
            if _error_code(e) == UNIQUE_VIOLATION:
                raise DuplicateRegistration()
            raise PersistenceFailure("Failed to create user", e)

        if not response.data:
            raise PersistenceFailure("Failed to create user: no data returned from Supabase")

        print(f"✅ User created successfully: {response.data[0]['id']}")
        return response.data[0]

    async def update_user(self, user_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update participant columns; returns the updated row or None if no row matched"""
        try:
            update_data = dict(update_data)
            update_data['updated_at'] = datetime.now(timezone.utc).isoformat()

            response = self.client.table('users')\
                .update(update_data)\
                .eq('id', user_id)\
                .execute()

        except Exception as e:
            print(f"❌ Supabase update error: {str(e)}")
            raise PersistenceFailure("Failed to update user", e)

        if response.data and len(response.data) > 0:
            return response.data[0]
        return None

    async def update_user_weight(self, user_id: str, weight: float) -> Optional[Dict[str, Any]]:
        """Update participant's current weight in the users table"""
        try:
            response = self.client.table('users')\
                .update({
                    'current_weight': weight,
                    'updated_at': datetime.now(timezone.utc).isoformat()
                })\
                .eq('id', user_id)\
                .execute()

        except Exception as e:
            print(f"❌ Error updating user weight: {e}")
            raise PersistenceFailure("Failed to update weight", e)

        print(f"✅ Updated user's current weight to {weight} kg")
        return response.data[0] if response.data else None

    async def get_all_users(self, order_by: str = 'points', desc: bool = True) -> List[Dict[str, Any]]:
        """Get every participant"""
        try:
            response = self.client.table('users')\
                .select('*')\
                .order(order_by, desc=desc)\
                .execute()

            users = response.data or []
            print(f"✅ Fetched {len(users)} users")
            return users

        except Exception as e:
            print(f"❌ Error fetching all users: {e}")
            raise PersistenceFailure("Failed to fetch users", e)

    async def delete_user(self, user_id: str) -> bool:
        """Delete a participant; weight history and achievements cascade"""
        try:
            response = self.client.table('users')\
                .delete()\
                .eq('id', user_id)\
                .execute()

        except Exception as e:
            print(f"❌ Error deleting user: {e}")
            raise PersistenceFailure("Failed to delete user", e)

        deleted = bool(response.data)
        if deleted:
            print(f"✅ User deleted successfully: {user_id}")
        return deleted

    # Weight history
    async def create_weight_entry(self, user_id: str, weight: float, recorded_date: date) -> Dict[str, Any]:
        """Insert a weight_history row (fires the points trigger)"""
        try:
            response = self.client.table('weight_history')\
                .insert({
                    'user_id': user_id,
                    'weight': weight,
                    'recorded_date': recorded_date.isoformat()
                })\
                .execute()

        except Exception as e:
            print(f"❌ Error creating weight entry: {e}")
            raise PersistenceFailure("Failed to add weight history", e)

        if not response.data:
            raise PersistenceFailure("Failed to add weight history: no data returned from Supabase")
        return response.data[0]

    async def update_weight_entry(self, entry_id: str, weight: float) -> Dict[str, Any]:
        """Overwrite the weight of an existing weight_history row (fires the points trigger)"""
        try:
            response = self.client.table('weight_history')\
                .update({'weight': weight})\
                .eq('id', entry_id)\
                .execute()

        except Exception as e:
            print(f"❌ Error updating weight entry: {e}")
            raise PersistenceFailure("Failed to update weight history", e)

        if not response.data:
            raise PersistenceFailure("Failed to update weight history: entry no longer exists")
        return response.data[0]

    async def get_weight_entry_by_date(self, user_id: str, recorded_date: date) -> Optional[Dict[str, Any]]:
        """Get the participant's weight entry for one calendar day"""
        try:
            response = self.client.table('weight_history')\
                .select('*')\
                .eq('user_id', user_id)\
                .eq('recorded_date', recorded_date.isoformat())\
                .limit(1)\
                .execute()

            return response.data[0] if response.data else None

        except Exception as e:
            print(f"❌ Error getting weight entry by date: {e}")
            raise PersistenceFailure("Failed to fetch weight history", e)

    async def get_weight_history(self, user_id: str) -> List[Dict[str, Any]]:
        """Get weight history for a participant, newest first"""
        try:
            print(f"🔍 Getting weight entries for user: {user_id}")

            response = self.client.table('weight_history')\
                .select('*')\
                .eq('user_id', user_id)\
                .order('recorded_date', desc=True)\
                .execute()

            entries = response.data or []
            print(f"✅ Retrieved {len(entries)} weight entries")
            return entries

        except Exception as e:
            print(f"❌ Error getting weight history: {e}")
            raise PersistenceFailure("Failed to fetch weight history", e)

    async def delete_weight_entry(self, entry_id: str) -> bool:
        """Delete a single weight entry"""
        try:
            response = self.client.table('weight_history')\
                .delete()\
                .eq('id', entry_id)\
                .execute()

        except Exception as e:
            print(f"❌ Error deleting weight entry: {e}")
            raise PersistenceFailure("Failed to delete weight entry", e)

        return bool(response.data)

    # Achievements
    async def get_achievements(self, user_id: str) -> List[Dict[str, Any]]:
        """Get a participant's achievements, newest first"""
        try:
            response = self.client.table('achievements')\
                .select('*')\
                .eq('user_id', user_id)\
                .order('earned_at', desc=True)\
                .execute()

            return response.data or []

        except Exception as e:
            print(f"❌ Error fetching achievements: {e}")
            raise PersistenceFailure("Failed to fetch achievements", e)

    async def create_achievements(self, achievement_rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert several achievement rows in one statement; either all are stored or none"""
        if not achievement_rows:
            return []

        try:
            response = self.client.table('achievements').insert(achievement_rows).execute()

        except Exception as e:
            print(f"❌ Error creating achievements: {e}")
            raise PersistenceFailure("Failed to save achievements", e)

        if not response.data or len(response.data) != len(achievement_rows):
            raise PersistenceFailure("Failed to save achievements: unexpected response from Supabase")
        return response.data

    # Admin
    async def reset_all_data(self) -> None:
        """Delete every achievement, weight entry and participant, in that order"""
        print("🔍 Starting data reset...")

        for table, label in (('achievements', 'achievements'),
                             ('weight_history', 'weight history'),
                             ('users', 'users')):
            try:
                self.client.table(table)\
                    .delete()\
                    .neq('id', NIL_UUID)\
                    .execute()
            except Exception as e:
                print(f"❌ Error deleting {label}: {e}")
                raise PersistenceFailure(f"Failed to delete {label}", e)

        print("✅ Data reset completed successfully")

    async def health_check(self) -> Dict[str, Any]:
        """Check database connection health"""
        try:
            self.client.table('users').select('id').limit(1).execute()
            return {
                "status": "healthy",
                "message": "Supabase connection is working"
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "message": f"Supabase connection failed: {str(e)}"
            }

# Global instance - initialized in main.py
supabase_service = None

def get_supabase_service() -> SupabaseService:
    """Get the global Supabase service instance"""
    global supabase_service
    if supabase_service is None:
        supabase_service = SupabaseService()
    return supabase_service

def init_supabase_service(client: Optional[Client] = None) -> SupabaseService:
    """Initialize the global Supabase service"""
    global supabase_service
    supabase_service = SupabaseService(client)
    return supabase_service
