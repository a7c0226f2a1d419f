"""
목표 계산기 (Goal Calculator)

상태를 저장하지 않는 순수 계산입니다.
입력 오류는 예외가 아니라 is_error=True 인 GoalCalculation 으로 반환합니다.

- min_amount 가 있으면: days_needed = ceil(goal / min_amount)
- 없고 target_date 가 있으면: days_left = ceil((target - now) / 1일),
  required_daily_amount = round(goal / days_left, 2)
- 둘 다 있으면 min_amount 가 우선합니다.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union

from saveit.schemas.goal import GoalCalculation
from saveit.services.ledger_service import MAX_AMOUNT

CENT = Decimal("0.01")
ONE_DAY_SECONDS = Decimal(timedelta(days=1).total_seconds())


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("NaN")
    return result


def _to_aware(value: Union[date, datetime]) -> datetime:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _error(message: str) -> GoalCalculation:
    return GoalCalculation(is_error=True, message=message)


def _positive(value: Optional[Decimal]) -> bool:
    return value is not None and value.is_finite() and value > 0


def calculate_goal(
    goal_amount: Any,
    min_amount: Any = None,
    target_date: Optional[Union[date, datetime]] = None,
    now: Optional[datetime] = None,
) -> GoalCalculation:
    goal = _to_decimal(goal_amount)
    if not _positive(goal) or goal > MAX_AMOUNT:
        return _error("Please enter a valid goal amount.")

    minimum = _to_decimal(min_amount)
    if minimum is not None:
        if not _positive(minimum):
            return _error("Minimum amount must be greater than zero.")

        try:
            days_needed = math.ceil(goal / minimum)
        except ArithmeticError:
            # 1e-999999 처럼 지나치게 작은 최소 금액은 Decimal 범위를 넘음
            return _error("Please enter a valid minimum amount.")
        return GoalCalculation(
            message=f"You need {days_needed} days to reach your goal.",
            days_needed=days_needed,
        )

    if target_date is not None:
        now = _to_aware(now or datetime.now(timezone.utc))
        remaining = _to_aware(target_date) - now
        if remaining.total_seconds() <= 0:
            return _error("Goal date must be in the future.")

        days_left = math.ceil(Decimal(remaining.total_seconds()) / ONE_DAY_SECONDS)
        per_day = (goal / days_left).quantize(CENT, rounding=ROUND_HALF_UP)
        return GoalCalculation(
            message=(
                f"You have {days_left} days left. "
                f"Save ${per_day} per day to reach your goal."
            ),
            days_left=days_left,
            required_daily_amount=per_day,
        )

    return _error("Please enter either a minimum amount or a date.")


def progress_percent(balance: Any, goal_amount: Any) -> float:
    """목표 대비 진행률 (0~100). 목표가 없으면 0"""
    goal = _to_decimal(goal_amount)
    current = _to_decimal(balance) or Decimal("0")
    if not _positive(goal) or not current.is_finite():
        return 0.0

    percent = current / goal * 100
    return float(min(Decimal("100"), percent).quantize(CENT, rounding=ROUND_HALF_UP))


class GoalService:
    """라우터/컨테이너용 래퍼"""

    def calculate(
        self,
        goal_amount: Any,
        min_amount: Any = None,
        target_date: Optional[Union[date, datetime]] = None,
        now: Optional[datetime] = None,
    ) -> GoalCalculation:
        return calculate_goal(goal_amount, min_amount, target_date, now)

    def progress_percent(self, balance: Any, goal_amount: Any) -> float:
        return progress_percent(balance, goal_amount)
