# models/achievement_schemas.py
from pydantic import BaseModel
from typing import List, Optional

class AchievementResponse(BaseModel):
    id: Optional[str] = None
    achievement_type: str
    achievement_value: Optional[str] = None
    title: str
    earned_at: Optional[str] = None

class AchievementListResponse(BaseModel):
    success: bool = True
    achievements: List[AchievementResponse] = []
