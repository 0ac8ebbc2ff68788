# services/leaderboard.py
from dataclasses import dataclass, field
from typing import Any, Dict, List

from services.points import read_points
from services.progress import display_progress, progress_percentage, weight_lost

TIERS = {1: 'gold', 2: 'silver', 3: 'bronze'}
STANDARD_TIER = 'standard'


@dataclass
class RankedParticipant:
    rank: int
    user: Dict[str, Any]
    weight_lost: float
    progress_percentage: float

    @property
    def tier(self) -> str:
        return TIERS.get(self.rank, STANDARD_TIER)

    @property
    def is_top_three(self) -> bool:
        return self.rank <= 3

    @property
    def display_progress(self) -> float:
        return display_progress(self.progress_percentage)


@dataclass
class Leaderboard:
    entries: List[RankedParticipant] = field(default_factory=list)

    @property
    def total_participants(self) -> int:
        return len(self.entries)

    @property
    def total_weight_lost(self) -> float:
        # Unclamped: gains reduce the total
        return sum(entry.weight_lost for entry in self.entries)


def rank_participants(users: List[Dict[str, Any]]) -> Leaderboard:
    """
    Rank participants by weight lost, largest first.

    Ties keep the order the rows were fetched in. Progress is reported raw
    here; use ``display_progress`` for the clamped value.
    """
    scored = []
    for user in users:
        start = float(user['start_weight'])
        current = float(user['current_weight'])
        target = float(user['target_weight'])
        scored.append((user, weight_lost(start, current), progress_percentage(start, current, target)))

    # sorted() is stable, so equal weight_lost keeps fetch order
    scored = sorted(scored, key=lambda item: item[1], reverse=True)

    return Leaderboard(entries=[
        RankedParticipant(rank=position + 1, user=user, weight_lost=lost, progress_percentage=progress)
        for position, (user, lost, progress) in enumerate(scored)
    ])


def admin_statistics(users: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Totals shown on the admin dashboard"""
    total_weight_lost = sum(
        float(user['start_weight']) - float(user['current_weight']) for user in users
    )
    return {
        'total_users': len(users),
        'total_weight_lost': round(total_weight_lost, 2),
        'total_points': sum(read_points(user) for user in users),
    }
