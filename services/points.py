# services/points.py
"""
Points are owned by the backend.

Every write to ``weight_history`` fires the ``calculate_points(start_weight,
current_weight)`` trigger, which stores the result in ``users.points``. The
application never recomputes points on the request path; it re-reads the
participant after a weight write and trusts the stored value.

``PointsFormula`` is the seam for deployments that need the formula locally
(the reference schema and the test backend). ``points_per_kg_lost`` is the
documented default: 100 points per whole kilogram lost, never negative, and
non-decreasing in cumulative weight lost.
"""
import math
from typing import Any, Callable, Dict

PointsFormula = Callable[[float, float], int]

POINTS_PER_KG = 100


def points_per_kg_lost(start_weight: float, current_weight: float) -> int:
    weight_lost = max(0.0, start_weight - current_weight)
    return int(math.floor(weight_lost)) * POINTS_PER_KG


def read_points(row: Dict[str, Any]) -> int:
    """Server-derived points from a users row, as a non-negative int"""
    raw = row.get('points')
    if raw is None:
        return 0
    try:
        return max(0, int(raw))
    except (TypeError, ValueError):
        print(f"⚠️ Ignoring non-numeric points value {raw!r} for user {row.get('id')}")
        return 0
