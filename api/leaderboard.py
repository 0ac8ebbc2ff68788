# api/leaderboard.py
from fastapi import APIRouter

from models.schemas import LeaderboardEntryResponse, LeaderboardResponse
from services.leaderboard import rank_participants
from services.points import read_points
from services.supabase_service import get_supabase_service

router = APIRouter()

@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard():
    """Participants ranked by weight lost"""
    users = await get_supabase_service().get_all_users(order_by='points', desc=True)
    board = rank_participants(users)

    entries = [
        LeaderboardEntryResponse(
            rank=entry.rank,
            tier=entry.tier,
            is_top_three=entry.is_top_three,
            id=str(entry.user['id']),
            name=entry.user['name'],
            start_weight=float(entry.user['start_weight']),
            current_weight=float(entry.user['current_weight']),
            target_weight=float(entry.user['target_weight']),
            points=read_points(entry.user),
            weight_lost=round(entry.weight_lost, 2),
            progress_percentage=round(entry.progress_percentage, 2),
            display_progress=round(entry.display_progress, 2),
        )
        for entry in board.entries
    ]

    return LeaderboardResponse(
        total_participants=board.total_participants,
        total_weight_lost=round(board.total_weight_lost, 2),
        entries=entries
    )
