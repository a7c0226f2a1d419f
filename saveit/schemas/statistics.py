from pydantic import BaseModel, Field
from decimal import Decimal


class UserSavingsStatistics(BaseModel):
    """사용자 저축 통계"""

    user_id: str
    tracker_count: int = Field(0, description="참여 중인 트래커 수")
    total_balance: Decimal = Field(Decimal("0"), description="참여 트래커 잔액 합계")
    total_deposited: Decimal = Field(Decimal("0"), description="본인 입금 합계")
    total_withdrawn: Decimal = Field(Decimal("0"), description="본인 출금 합계")
    transaction_count: int = Field(0, description="본인 거래 수")
    best_streak_days: int = Field(0, description="현재 가장 긴 스트릭")
    highest_streak_days: int = Field(0, description="역대 최고 스트릭")
    goals_completed: int = Field(0, description="목표 달성 트래커 수")
