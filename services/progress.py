# services/progress.py
from datetime import date, datetime
from typing import Optional, Union

CHALLENGE_DAYS = 21


def weight_lost(start_weight: float, current_weight: float) -> float:
    return start_weight - current_weight


def progress_percentage(start_weight: float, current_weight: float, target_weight: float) -> float:
    """
    Share of the start-to-target gap closed, unclamped. A participant whose
    target equals (or exceeds) the start weight has no gap and reports 0.
    """
    goal_gap = start_weight - target_weight
    if goal_gap <= 0:
        return 0.0
    return (start_weight - current_weight) / goal_gap * 100


def display_progress(raw_percentage: float) -> float:
    """Clamp a progress percentage to [0, 100] for display"""
    return min(max(raw_percentage, 0.0), 100.0)


def is_weight_gain(start_weight: float, current_weight: float) -> bool:
    return current_weight > start_weight


def _to_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    if 'T' not in text and ' ' not in text:
        return datetime.strptime(text[:10], '%Y-%m-%d').date()
    return datetime.fromisoformat(text.replace('Z', '+00:00')).date()


def challenge_day(join_date: Union[str, date, datetime, None], today: date) -> int:
    """1-based day of the challenge; day 1 is the join date"""
    joined = _to_date(join_date)
    if joined is None:
        return 1
    return max(1, (today - joined).days + 1)


def days_remaining(join_date: Union[str, date, datetime, None], today: date) -> int:
    return max(0, CHALLENGE_DAYS - challenge_day(join_date, today))
