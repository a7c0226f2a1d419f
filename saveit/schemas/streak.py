import datetime as dt
from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional


class StreakLogEntry(BaseModel):
    """일별 스트릭 로그"""

    id: int
    tracker_id: int
    user_id: str
    date: dt.date
    amount_deposited: Decimal
    is_active: bool
    activated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class StreakBadge(BaseModel):
    name: str
    emoji: str = ""


class StreakStatusResponse(BaseModel):
    """트래커 스트릭 상태"""

    tracker_id: int = Field(..., description="트래커 ID")
    enabled: bool = Field(..., description="스트릭 사용 여부")
    is_active_today: bool = Field(False, description="오늘 활성화 여부")
    streak_days: int = Field(0, description="연속 일수")
    highest_streak_days: int = Field(0, description="최고 연속 일수")
    streak_days_label: str = Field("0 days", description="표시용 연속 일수")
    amount_today: Decimal = Field(Decimal("0"), description="오늘 누적 입금액")
    min_amount: Optional[Decimal] = Field(None, description="하루 최소 입금액")
    badge: Optional[StreakBadge] = Field(None, description="연속 일수 배지")


class StreakRunEntry(BaseModel):
    """스트릭 기록 한 구간 (ongoing / lost)"""

    id: int
    tracker_id: int
    min_amount: Decimal
    status: str
    streak_days: int
    highest_streak_days: int
    created_at: Optional[dt.datetime] = None
    ended_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class StreakHistoryResponse(BaseModel):
    """트래커 스트릭 기록 - 최신 구간부터"""

    tracker_id: int
    highest_streak_days: int = Field(0, description="트래커 최고 연속 일수")
    runs: List[StreakRunEntry] = Field(default_factory=list)
    recent_days: List[StreakLogEntry] = Field(
        default_factory=list, description="최근 일별 로그 (최신순)"
    )
