from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class GoalCalculationRequest(BaseModel):
    goal_amount: Decimal = Field(..., description="목표 금액")
    min_amount: Optional[Decimal] = Field(None, description="하루 최소 저축액")
    target_date: Optional[datetime] = Field(None, description="목표 일시")


class GoalCalculation(BaseModel):
    """
    목표 계산 결과

    입력 오류는 예외가 아니라 is_error=True 인 결과로 반환됩니다.
    """

    is_error: bool = Field(False, description="입력 오류 여부")
    message: str = Field("", description="사용자에게 보여줄 메시지")
    days_needed: Optional[int] = Field(None, description="최소 저축액 기준 필요 일수")
    days_left: Optional[int] = Field(None, description="목표 날짜까지 남은 일수")
    required_daily_amount: Optional[Decimal] = Field(
        None, description="목표 날짜까지 하루 필요 저축액"
    )
