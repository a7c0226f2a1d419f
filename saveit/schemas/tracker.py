from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from saveit.models.tracker import ContributorRole


class StreakConfig(BaseModel):
    """스트릭 설정"""

    enabled: bool = Field(False, description="스트릭 사용 여부")
    min_amount: Optional[Decimal] = Field(None, description="하루 최소 입금액")

    @model_validator(mode="after")
    def min_amount_required_when_enabled(self) -> "StreakConfig":
        if self.enabled and (self.min_amount is None or self.min_amount <= 0):
            raise ValueError("Please enter a valid minimum streak amount.")
        if not self.enabled:
            self.min_amount = None
        return self


class GoalConfig(BaseModel):
    """목표 설정 - min_daily_amount 와 target_date 는 상호 배타적"""

    enabled: bool = Field(False, description="목표 사용 여부")
    amount: Optional[Decimal] = Field(None, description="목표 금액")
    min_daily_amount: Optional[Decimal] = Field(None, description="하루 최소 저축액")
    target_date: Optional[date] = Field(None, description="목표 날짜")

    @model_validator(mode="after")
    def validate_goal(self) -> "GoalConfig":
        if not self.enabled:
            self.amount = None
            self.min_daily_amount = None
            self.target_date = None
            return self

        if self.amount is None or self.amount <= 0:
            raise ValueError("Please enter a valid goal amount.")
        if self.min_daily_amount is not None and self.target_date is not None:
            raise ValueError(
                "Set either a minimum daily amount or a goal date, not both."
            )
        if self.min_daily_amount is None and self.target_date is None:
            raise ValueError(
                "Please enter either a minimum daily amount or a goal date."
            )
        if self.min_daily_amount is not None and self.min_daily_amount <= 0:
            raise ValueError("Minimum amount must be greater than zero.")
        return self


class TrackerConfig(BaseModel):
    """트래커 생성/수정 요청"""

    tracker_name: str = Field(..., min_length=1, max_length=100, description="트래커 이름")
    description: Optional[str] = Field(None, max_length=500, description="설명")
    bank_name: Optional[str] = Field(None, max_length=100, description="은행 이름")
    interest_rate: Optional[Decimal] = Field(None, ge=0, description="이자율 (%)")
    streak: StreakConfig = Field(default_factory=StreakConfig)
    goal: GoalConfig = Field(default_factory=GoalConfig)
    contributors: List[str] = Field(default_factory=list, description="기여자 username 목록")

    @field_validator("tracker_name")
    @classmethod
    def tracker_name_must_not_be_blank(cls, v: str) -> str:
        if v.strip() == "":
            raise ValueError("Tracker name is required.")
        return v.strip()


class TrackerResponse(BaseModel):
    id: int
    owner_id: str
    tracker_name: str
    description: Optional[str] = None
    bank_name: Optional[str] = None
    interest_rate: Optional[Decimal] = None
    balance: Decimal
    goal_enabled: bool
    goal_amount: Optional[Decimal] = None
    min_daily_amount: Optional[Decimal] = None
    goal_date: Optional[date] = None
    streak_enabled: bool
    streak_min_amount: Optional[Decimal] = None
    streak_days: int
    highest_streak_days: int = 0
    last_streak_check: Optional[date] = None
    created_at: Optional[datetime] = None
    progress_percent: Optional[float] = None

    class Config:
        from_attributes = True


class ContributorEntry(BaseModel):
    user_id: str
    username: str
    role: ContributorRole

    class Config:
        from_attributes = True


class TrackerMutationResponse(BaseModel):
    """트래커 생성/수정/삭제 결과"""

    success: bool = Field(..., description="성공 여부")
    tracker_id: Optional[int] = Field(None, description="트래커 ID")
    skipped_usernames: List[str] = Field(
        default_factory=list, description="찾을 수 없어 제외된 username"
    )
    message: str = Field("", description="응답 메시지")
