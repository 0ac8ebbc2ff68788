# services/mappers.py
"""
Row -> view-model mapping.

Backend rows are plain dicts straight from PostgREST; every conversion to a
response model goes through here so malformed rows fail loudly at the
boundary instead of leaking into the API.
"""
from datetime import date
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from models.achievement_schemas import AchievementResponse
from models.schemas import AdminUserRow, ParticipantResponse, WeightPoint
from models.weight_schemas import WeightEntryResponse
from services.achievements import achievement_title, key_from_row
from services.errors import PersistenceFailure
from services.points import read_points
from services.progress import (
    challenge_day,
    days_remaining,
    display_progress,
    is_weight_gain,
    progress_percentage,
    weight_lost,
)


def _text(value: Any) -> Any:
    return None if value is None else str(value)


def achievement_to_response(row: Dict[str, Any]) -> AchievementResponse:
    try:
        key = key_from_row(row)
    except (KeyError, ValueError) as e:
        print(f"❌ Malformed achievement row {row.get('id')}: {e}")
        raise PersistenceFailure("Unexpected achievement data from backend", e)

    return AchievementResponse(
        id=_text(row.get('id')),
        achievement_type=key.type.value,
        achievement_value=key.stored_value,
        title=achievement_title(key),
        earned_at=_text(row.get('earned_at')),
    )


def weight_entry_to_response(row: Dict[str, Any]) -> WeightEntryResponse:
    try:
        return WeightEntryResponse(
            id=str(row['id']),
            user_id=str(row['user_id']),
            weight=float(row['weight']),
            recorded_date=str(row['recorded_date']),
            created_at=_text(row.get('created_at')),
        )
    except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
        print(f"❌ Malformed weight entry row {row.get('id')}: {e}")
        raise PersistenceFailure("Unexpected weight history data from backend", e)


def participant_to_response(
    row: Dict[str, Any],
    achievement_rows: List[Dict[str, Any]],
    weight_rows: List[Dict[str, Any]],
    today: date
) -> ParticipantResponse:
    """Combine a users row with its achievements and history into the client view"""
    try:
        start = float(row['start_weight'])
        current = float(row['current_weight'])
        target = float(row['target_weight'])

        return ParticipantResponse(
            id=str(row['id']),
            mobile=str(row['mobile']),
            name=str(row['name']),
            start_weight=start,
            current_weight=current,
            target_weight=target,
            points=read_points(row),
            join_date=_text(row.get('join_date')),
            weight_lost=round(weight_lost(start, current), 2),
            progress_percentage=round(display_progress(progress_percentage(start, current, target)), 2),
            weight_gained=is_weight_gain(start, current),
            challenge_day=challenge_day(row.get('join_date'), today),
            days_remaining=days_remaining(row.get('join_date'), today),
            achievements=[achievement_to_response(a) for a in achievement_rows],
            weight_history=[
                WeightPoint(date=str(w['recorded_date']), weight=float(w['weight']))
                for w in weight_rows
            ],
        )
    except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
        print(f"❌ Malformed user row {row.get('id')}: {e}")
        raise PersistenceFailure("Unexpected user data from backend", e)


def admin_user_to_response(row: Dict[str, Any]) -> AdminUserRow:
    try:
        return AdminUserRow(
            id=str(row['id']),
            mobile=str(row['mobile']),
            name=str(row['name']),
            start_weight=float(row['start_weight']),
            current_weight=float(row['current_weight']),
            target_weight=float(row['target_weight']),
            points=read_points(row),
            join_date=_text(row.get('join_date')),
            created_at=_text(row.get('created_at')),
            updated_at=_text(row.get('updated_at')),
        )
    except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
        print(f"❌ Malformed user row {row.get('id')}: {e}")
        raise PersistenceFailure("Unexpected user data from backend", e)
