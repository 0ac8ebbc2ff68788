# api/weight.py
from fastapi import APIRouter, Depends

from api.participants import current_participant
from models.weight_schemas import WeightUpdateRequest, WeightUpdateResponse
from services.mappers import achievement_to_response, participant_to_response, weight_entry_to_response
from services.session_service import ParticipantSession
from services.weight_workflow import get_weight_workflow
from utils.timezone_utils import get_timezone_offset, get_user_today

router = APIRouter()

@router.post("", response_model=WeightUpdateResponse)
async def update_weight(
    weight_data: WeightUpdateRequest,
    session: ParticipantSession = Depends(current_participant),
    tz_offset: int = Depends(get_timezone_offset)
):
    """Record today's weight and report points and newly unlocked achievements"""
    print(f"⚖️ Saving weight: {weight_data.weight} kg for user {session.user_id}")

    today = get_user_today(tz_offset)
    result = await get_weight_workflow().update_weight(session.user_id, weight_data.weight, today)

    user = participant_to_response(result.user, result.achievements, result.weight_history, today)

    change = result.weight_change
    if change > 0:
        change_text = f"gained {change:.1f} kg"
    else:
        change_text = f"lost {abs(change):.1f} kg"

    return WeightUpdateResponse(
        user=user,
        weight_entry=weight_entry_to_response(result.weight_entry),
        new_achievements=[achievement_to_response(row) for row in result.new_achievements],
        previous_weight=result.previous_weight,
        weight_change=round(change, 2),
        weight_gained=result.weight_gained,
        states=[state.value for state in result.states],
        message=(f"Your weight has been updated to {weight_data.weight} kg. "
                 f"You {change_text}. You now have {user.points} points!")
    )
