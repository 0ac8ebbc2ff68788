# models/schemas.py
from pydantic import BaseModel
from typing import Optional, List

from models.achievement_schemas import AchievementResponse

class ParticipantCreate(BaseModel):
    """For participant registration"""
    mobile: str
    name: str
    start_weight: float
    target_weight: float

class ParticipantLogin(BaseModel):
    mobile: str

class WeightPoint(BaseModel):
    date: str
    weight: float

class ParticipantResponse(BaseModel):
    """Participant view model returned to clients"""
    id: str
    mobile: str
    name: str
    start_weight: float
    current_weight: float
    target_weight: float
    points: int = 0
    join_date: Optional[str] = None
    weight_lost: float = 0.0
    progress_percentage: float = 0.0
    weight_gained: bool = False
    challenge_day: int = 1
    days_remaining: int = 0
    achievements: List[AchievementResponse] = []
    weight_history: List[WeightPoint] = []

class SessionResponse(BaseModel):
    success: bool
    token: Optional[str] = None
    user: Optional[ParticipantResponse] = None
    message: Optional[str] = None
    error: Optional[str] = None

class AdminLogin(BaseModel):
    mobile: str

class AdminUser(BaseModel):
    id: str
    mobile: str
    name: str
    created_at: str

class AdminSessionResponse(BaseModel):
    success: bool
    token: Optional[str] = None
    admin: Optional[AdminUser] = None
    message: Optional[str] = None

class AdminUserUpdate(BaseModel):
    """Fields an administrator can edit. Start/target ordering is not re-checked."""
    name: Optional[str] = None
    start_weight: Optional[float] = None
    current_weight: Optional[float] = None
    target_weight: Optional[float] = None

class AdminUserRow(BaseModel):
    id: str
    mobile: str
    name: str
    start_weight: float
    current_weight: float
    target_weight: float
    points: int = 0
    join_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

class AdminStatsResponse(BaseModel):
    total_users: int
    total_weight_lost: float
    total_points: int

class LeaderboardEntryResponse(BaseModel):
    rank: int
    tier: str
    is_top_three: bool
    id: str
    name: str
    start_weight: float
    current_weight: float
    target_weight: float
    points: int
    weight_lost: float
    progress_percentage: float
    display_progress: float

class LeaderboardResponse(BaseModel):
    success: bool = True
    total_participants: int = 0
    total_weight_lost: float = 0.0
    entries: List[LeaderboardEntryResponse] = []
