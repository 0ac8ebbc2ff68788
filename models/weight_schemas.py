# models/weight_schemas.py
from pydantic import BaseModel
from typing import List, Optional

from models.achievement_schemas import AchievementResponse
from models.schemas import ParticipantResponse

class WeightUpdateRequest(BaseModel):
    weight: float

class WeightEntryResponse(BaseModel):
    id: str
    user_id: str
    weight: float
    recorded_date: str
    created_at: Optional[str] = None

class WeightHistoryResponse(BaseModel):
    success: bool = True
    weights: List[WeightEntryResponse] = []
    total_entries: int = 0

class WeightUpdateResponse(BaseModel):
    success: bool = True
    user: ParticipantResponse
    weight_entry: WeightEntryResponse
    new_achievements: List[AchievementResponse] = []
    previous_weight: float
    weight_change: float
    weight_gained: bool
    states: List[str] = []
    message: Optional[str] = None
