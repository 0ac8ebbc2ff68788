# services/weight_workflow.py
"""
Weight update workflow.

One call walks the states

    validating -> persisting-weight -> persisting-history -> refetching
    -> classifying -> done | failed

Points are derived by the backend trigger on the weight_history write, so the
participant is re-read after the write and its points are trusted as-is.
Achievements are classified locally from the refreshed weights and written
in a single insert, so either every new badge is stored or none is.

The current-weight write and the history upsert are two backend calls. When
the history write fails the previous current weight is restored before the
error is raised. This is compensation rather than a transaction: a second
device updating the same participant can still interleave.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from services.achievements import AchievementKey, classify_achievements, key_from_row, key_to_row
from services.errors import ChallengeError, InvalidWeight, ParticipantNotFound, PersistenceFailure
from services.supabase_service import SupabaseService, get_supabase_service
from services.validation import validate_weight


class WorkflowState(str, Enum):
    VALIDATING = 'validating'
    PERSISTING_WEIGHT = 'persisting-weight'
    PERSISTING_HISTORY = 'persisting-history'
    REFETCHING = 'refetching'
    CLASSIFYING = 'classifying'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class WeightUpdateResult:
    user: Dict[str, Any]
    weight_entry: Dict[str, Any]
    weight_history: List[Dict[str, Any]]
    achievements: List[Dict[str, Any]]
    new_achievements: List[Dict[str, Any]]
    previous_weight: float
    states: List[WorkflowState] = field(default_factory=list)

    @property
    def weight_change(self) -> float:
        return float(self.user['current_weight']) - self.previous_weight

    @property
    def weight_gained(self) -> bool:
        return float(self.user['current_weight']) > float(self.user['start_weight'])


class WeightUpdateWorkflow:
    def __init__(self, supabase_service: Optional[SupabaseService] = None):
        self.supabase_service = supabase_service or get_supabase_service()

    async def update_weight(self, user_id: str, new_weight: float, today: date) -> WeightUpdateResult:
        """Record new_weight as the participant's weight for today"""
        states: List[WorkflowState] = []

        def enter(state: WorkflowState) -> None:
            states.append(state)
            print(f"⚖️ [{user_id}] {state.value}")

        try:
            enter(WorkflowState.VALIDATING)
            if not validate_weight(new_weight):
                raise InvalidWeight()

            user = await self.supabase_service.get_user_by_id(user_id)
            if not user:
                raise ParticipantNotFound()
            previous_weight = float(user['current_weight'])
            achievements = await self.supabase_service.get_achievements(user_id)

            enter(WorkflowState.PERSISTING_WEIGHT)
            await self.supabase_service.update_user_weight(user_id, new_weight)

            enter(WorkflowState.PERSISTING_HISTORY)
            try:
                weight_entry = await self._upsert_entry(user_id, new_weight, today)
            except PersistenceFailure:
                await self._restore_weight(user_id, previous_weight)
                raise

            enter(WorkflowState.REFETCHING)
            refreshed = await self.supabase_service.get_user_by_id(user_id)
            if not refreshed:
                raise PersistenceFailure("Failed to fetch updated user data")
            weight_history = await self.supabase_service.get_weight_history(user_id)

            enter(WorkflowState.CLASSIFYING)
            new_achievements = await self._award_achievements(refreshed, achievements)

            enter(WorkflowState.DONE)
            print(f"✅ Weight updated to {new_weight} kg for user {user_id}, "
                  f"{len(new_achievements)} new achievement(s), {refreshed.get('points')} points")

            return WeightUpdateResult(
                user=refreshed,
                weight_entry=weight_entry,
                weight_history=weight_history,
                achievements=new_achievements + achievements,
                new_achievements=new_achievements,
                previous_weight=previous_weight,
                states=states,
            )

        except ChallengeError as e:
            enter(WorkflowState.FAILED)
            print(f"❌ Weight update failed for user {user_id}: {e.message}")
            raise

    async def _upsert_entry(self, user_id: str, weight: float, today: date) -> Dict[str, Any]:
        existing = await self.supabase_service.get_weight_entry_by_date(user_id, today)
        if existing:
            return await self.supabase_service.update_weight_entry(existing['id'], weight)
        return await self.supabase_service.create_weight_entry(user_id, weight, today)

    async def _restore_weight(self, user_id: str, previous_weight: float) -> None:
        try:
            await self.supabase_service.update_user_weight(user_id, previous_weight)
            print(f"⚠️ Restored current weight to {previous_weight} kg for user {user_id}")
        except PersistenceFailure as e:
            # The history failure is the error the caller needs to see
            print(f"❌ Could not restore current weight for user {user_id}: {e.message}")

    async def _award_achievements(
        self,
        user: Dict[str, Any],
        existing_rows: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        start = float(user['start_weight'])
        current = float(user['current_weight'])
        target = float(user['target_weight'])

        # Weight gains still refresh points and progress, they just never earn badges
        if current > start:
            return []

        earned = set()
        for row in existing_rows:
            try:
                earned.add(key_from_row(row))
            except (KeyError, ValueError) as e:
                print(f"⚠️ Skipping unreadable achievement {row.get('id')}: {e}")

        new_keys: List[AchievementKey] = classify_achievements(start, current, target, earned)

        # One insert so a failure stores none of the new rows
        created = await self.supabase_service.create_achievements(
            [key_to_row(user['id'], key) for key in new_keys]
        )

        if created:
            print(f"🏆 User {user['id']} unlocked {len(created)} achievement(s)")
        return created


def get_weight_workflow() -> WeightUpdateWorkflow:
    return WeightUpdateWorkflow(get_supabase_service())
