import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from saveit.services.goal_service import GoalService, calculate_goal, progress_percent

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestGoalCalculator:
    """목표 계산기 테스트"""

    def test_days_needed_from_min_amount(self):
        result = calculate_goal(1000, min_amount=100)

        assert result.is_error is False
        assert result.days_needed == 10
        assert result.message == "You need 10 days to reach your goal."

    def test_days_needed_rounds_up(self):
        assert calculate_goal(1000, min_amount=300).days_needed == 4

    def test_required_daily_amount_from_target_date(self):
        """목표 날짜까지 10일이면 하루 100.00"""
        result = calculate_goal(1000, target_date=NOW + timedelta(days=10), now=NOW)

        assert result.is_error is False
        assert result.days_left == 10
        assert result.required_daily_amount == Decimal("100.00")
        assert "$100.00 per day" in result.message

    def test_partial_day_counts_as_full_day(self):
        result = calculate_goal(100, target_date=NOW + timedelta(days=2, hours=1), now=NOW)

        assert result.days_left == 3
        assert result.required_daily_amount == Decimal("33.33")

    def test_target_date_as_plain_date(self):
        result = calculate_goal(90, target_date=date(2024, 5, 4), now=NOW)

        # 2024-05-04 00:00 UTC 까지 2.5일 -> 3일
        assert result.days_left == 3
        assert result.required_daily_amount == Decimal("30.00")

    def test_min_amount_takes_priority_over_date(self):
        result = calculate_goal(
            1000, min_amount=100, target_date=NOW + timedelta(days=3), now=NOW
        )

        assert result.days_needed == 10
        assert result.days_left is None

    @pytest.mark.parametrize("goal", [0, -1, None, "abc"])
    def test_invalid_goal_amount(self, goal):
        result = calculate_goal(goal, min_amount=100)

        assert result.is_error is True
        assert result.message == "Please enter a valid goal amount."

    @pytest.mark.parametrize("goal", ["1e30", "10000000000", "Infinity"])
    def test_goal_beyond_storable_amount(self, goal):
        """저장 가능한 최대 금액을 넘는 목표는 날짜 계산 전에 입력 오류로 반환"""
        result = calculate_goal(goal, target_date=NOW + timedelta(days=10), now=NOW)

        assert result.is_error is True
        assert result.message == "Please enter a valid goal amount."

    def test_largest_goal_with_target_date(self):
        result = calculate_goal("9999999999.99", target_date=NOW + timedelta(days=1), now=NOW)

        assert result.is_error is False
        assert result.required_daily_amount == Decimal("9999999999.99")

    def test_vanishing_min_amount(self):
        result = calculate_goal(100, min_amount="1e-999999")

        assert result.is_error is True
        assert result.message == "Please enter a valid minimum amount."

    @pytest.mark.parametrize("minimum", [0, -5])
    def test_min_amount_must_be_positive(self, minimum):
        result = calculate_goal(100, min_amount=minimum)

        assert result.is_error is True
        assert result.message == "Minimum amount must be greater than zero."

    def test_past_target_date(self):
        result = calculate_goal(100, target_date=NOW - timedelta(minutes=1), now=NOW)

        assert result.is_error is True
        assert result.message == "Goal date must be in the future."

    def test_neither_min_amount_nor_date(self):
        result = calculate_goal(100)

        assert result.is_error is True
        assert result.message == "Please enter either a minimum amount or a date."


class TestProgressPercent:
    @pytest.mark.parametrize(
        "balance, goal, expected",
        [
            ("250", "1000", 25.0),
            ("1500", "1000", 100.0),
            ("0", "1000", 0.0),
            ("10", None, 0.0),
            ("10", "0", 0.0),
        ],
    )
    def test_progress(self, balance, goal, expected):
        assert progress_percent(balance, goal) == expected

    def test_service_wrapper(self):
        service = GoalService()

        assert service.calculate(500, min_amount=50).days_needed == 10
        assert service.progress_percent(Decimal("50"), Decimal("200")) == 25.0
