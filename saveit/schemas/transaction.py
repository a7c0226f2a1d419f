from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from saveit.models.transaction import TransactionType


class TransactionErrorCode(str, Enum):
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    TRACKER_NOT_FOUND = "TRACKER_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    STORAGE_FAILURE = "STORAGE_FAILURE"


class TransactionRequest(BaseModel):
    """입출금 요청"""

    type: TransactionType = Field(..., description="deposit 또는 withdraw")
    amount: Decimal = Field(..., description="금액 (0보다 커야 함)")
    note: Optional[str] = Field(None, max_length=255, description="메모")


class TransactionEntry(BaseModel):
    """거래 원장 항목"""

    id: int = Field(..., description="거래 ID")
    tracker_id: int = Field(..., description="트래커 ID")
    user_id: str = Field(..., description="거래한 사용자 ID")
    type: TransactionType = Field(..., description="거래 유형")
    amount: Decimal = Field(..., description="거래 금액")
    note: Optional[str] = Field(None, description="메모")
    new_balance: Decimal = Field(..., description="거래 후 잔액")
    created_at: Optional[datetime] = Field(None, description="생성 시간")
    username: Optional[str] = Field(None, description="거래한 사용자 이름")
    tracker_name: Optional[str] = Field(None, description="트래커 이름")

    class Config:
        from_attributes = True


class LedgerResult(BaseModel):
    """잔액 원장 적용 결과"""

    success: bool
    error_code: Optional[TransactionErrorCode] = None
    transaction: Optional[TransactionEntry] = None
    balance: Optional[Decimal] = None
    message: str = ""


class StreakUpdate(BaseModel):
    """입금 후 스트릭 처리 결과"""

    streak_activated: bool = Field(False, description="이번 입금으로 오늘 스트릭이 활성화되었는지")
    is_active_today: bool = Field(False, description="오늘 스트릭 활성 여부")
    streak_days: int = Field(0, description="연속 일수")
    amount_today: Decimal = Field(Decimal("0"), description="오늘 누적 입금액")


class TransactionResult(BaseModel):
    """입출금 처리 결과 - 실패도 예외가 아닌 결과로 반환"""

    success: bool = Field(..., description="성공 여부")
    error_code: Optional[TransactionErrorCode] = Field(None, description="실패 코드")
    transaction: Optional[TransactionEntry] = Field(None, description="생성된 거래")
    balance: Optional[Decimal] = Field(None, description="거래 후 (또는 현재) 잔액")
    streak: Optional[StreakUpdate] = Field(None, description="스트릭 처리 결과 (입금만)")
    message: str = Field("", description="응답 메시지")

    @property
    def streak_activated(self) -> bool:
        return bool(self.streak and self.streak.streak_activated)
