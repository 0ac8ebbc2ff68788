# services/achievements.py
"""
Achievement classification.

An achievement is identified by a tagged key ``(type, value)``:

- ``kg-lost`` with a whole-kilogram threshold (``1``, ``2``, ...)
- ``percent-complete`` with a milestone from ``PERCENT_MILESTONES``
- ``goal-achieved`` with no value

``classify_achievements`` is pure: callers pass everything it needs and
persist the result themselves.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

PERCENT_MILESTONES = (25, 50, 75, 100)


class AchievementType(str, Enum):
    KG_LOST = 'kg-lost'
    PERCENT_COMPLETE = 'percent-complete'
    GOAL_ACHIEVED = 'goal-achieved'


@dataclass(frozen=True)
class AchievementKey:
    type: AchievementType
    value: Optional[int] = None

    @classmethod
    def kg_lost(cls, kg: int) -> 'AchievementKey':
        return cls(AchievementType.KG_LOST, kg)

    @classmethod
    def percent_complete(cls, percent: int) -> 'AchievementKey':
        return cls(AchievementType.PERCENT_COMPLETE, percent)

    @classmethod
    def goal_achieved(cls) -> 'AchievementKey':
        return cls(AchievementType.GOAL_ACHIEVED)

    @property
    def stored_value(self) -> Optional[str]:
        """Value as written to achievements.achievement_value"""
        return None if self.value is None else str(self.value)


def classify_achievements(
    start_weight: float,
    current_weight: float,
    target_weight: float,
    earned: Iterable[AchievementKey] = ()
) -> List[AchievementKey]:
    """
    Return the achievements that qualify for these weights and are not in
    ``earned``. Ordered kg thresholds first, then percent milestones, then
    the goal. A weight above the start weight qualifies for nothing.
    """
    if current_weight > start_weight:
        return []

    earned = set(earned)
    new_keys: List[AchievementKey] = []

    weight_lost = start_weight - current_weight
    for kg in range(1, int(math.floor(weight_lost)) + 1):
        key = AchievementKey.kg_lost(kg)
        if key not in earned:
            new_keys.append(key)

    goal_gap = start_weight - target_weight
    if goal_gap > 0:
        percent_done = weight_lost / goal_gap * 100
        for milestone in PERCENT_MILESTONES:
            key = AchievementKey.percent_complete(milestone)
            if percent_done >= milestone and key not in earned:
                new_keys.append(key)

    goal = AchievementKey.goal_achieved()
    if current_weight <= target_weight and goal not in earned:
        new_keys.append(goal)

    return new_keys


def key_from_row(row: Dict[str, Any]) -> AchievementKey:
    """Build a key from an achievements row; raises ValueError on unknown data"""
    achievement_type = AchievementType(row['achievement_type'])
    raw_value = row.get('achievement_value')

    if achievement_type is AchievementType.GOAL_ACHIEVED:
        return AchievementKey.goal_achieved()
    if raw_value is None or str(raw_value).strip() == '':
        raise ValueError(f"Achievement of type {achievement_type.value} is missing a value")
    return AchievementKey(achievement_type, int(float(raw_value)))


def key_to_row(user_id: str, key: AchievementKey) -> Dict[str, Any]:
    return {
        'user_id': user_id,
        'achievement_type': key.type.value,
        'achievement_value': key.stored_value,
    }


def achievement_title(key: AchievementKey) -> str:
    """Celebration text shown when an achievement is unlocked"""
    if key.type is AchievementType.KG_LOST:
        return f"{key.value} KG Lost!"
    if key.type is AchievementType.PERCENT_COMPLETE:
        return f"{key.value}% Complete!"
    return "Goal Achieved!"
