import pytest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from saveit.core.exceptions import AuthorizationError, TrackerNotFoundError
from saveit.models.streak import StreakLog
from saveit.models.transaction import Transaction
from saveit.schemas.transaction import TransactionErrorCode
from saveit.services.transaction_service import TransactionService

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(db_session, test_settings):
    return TransactionService(db_session, settings=test_settings)


class TestSubmitTransaction:
    """입출금 처리 테스트"""

    def test_deposit_success(self, service, db_session, owner, make_tracker):
        # Given
        tracker = make_tracker(owner)

        # When
        result = service.submit(tracker.id, owner.id, "deposit", "120.50", note="first", now=NOW)

        # Then
        assert result.success is True
        assert result.error_code is None
        assert result.balance == Decimal("120.50")
        assert result.transaction.type == "deposit"
        assert result.transaction.user_id == owner.id
        assert result.streak is not None
        assert result.streak_activated is False
        db_session.refresh(tracker)
        assert tracker.balance == Decimal("120.50")

    def test_contributor_can_deposit(self, service, owner, contributor, make_tracker):
        tracker = make_tracker(owner, contributors=[contributor])

        result = service.submit(tracker.id, contributor.id, "deposit", 10, now=NOW)

        assert result.success is True

    def test_deposit_reports_streak_activation(self, service, owner, make_tracker):
        tracker = make_tracker(owner, streak_min_amount="50")

        first = service.submit(tracker.id, owner.id, "deposit", 30, now=NOW)
        second = service.submit(tracker.id, owner.id, "deposit", 25, now=NOW)

        assert first.streak_activated is False
        assert second.streak_activated is True
        assert second.streak.streak_days == 1
        assert second.streak.amount_today == Decimal("55")

    def test_withdraw_does_not_touch_streak(self, service, db_session, owner, make_tracker):
        tracker = make_tracker(owner, balance="100", streak_min_amount="10")

        result = service.submit(tracker.id, owner.id, "withdraw", 50, now=NOW)

        assert result.success is True
        assert result.streak is None
        assert db_session.query(StreakLog).count() == 0

    def test_deposit_then_withdraw_restores_balance(self, service, db_session, owner, make_tracker):
        """입금 후 같은 금액 출금 시 원래 잔액으로 정확히 복원"""
        tracker = make_tracker(owner, balance="17.35")

        service.submit(tracker.id, owner.id, "deposit", "0.10", now=NOW)
        result = service.submit(tracker.id, owner.id, "withdraw", "0.10", now=NOW)

        assert result.balance == Decimal("17.35")
        db_session.refresh(tracker)
        assert tracker.balance == Decimal("17.35")

    def test_double_withdraw_of_full_balance(self, service, db_session, owner, make_tracker):
        """전액 출금 두 번: 두 번째는 INSUFFICIENT_FUNDS, 잔액 0 유지"""
        tracker = make_tracker(owner, balance="80")

        first = service.submit(tracker.id, owner.id, "withdraw", 80, now=NOW)
        second = service.submit(tracker.id, owner.id, "withdraw", 80, now=NOW)

        assert first.success is True
        assert second.success is False
        assert second.error_code == TransactionErrorCode.INSUFFICIENT_FUNDS
        assert second.balance == Decimal("0")
        assert db_session.query(Transaction).count() == 1

    def test_non_member_is_denied(self, service, db_session, owner, outsider, make_tracker):
        """멤버가 아니면 PERMISSION_DENIED, 거래 기록 없음"""
        tracker = make_tracker(owner, balance="10")

        result = service.submit(tracker.id, outsider.id, "deposit", 10, now=NOW)

        assert result.success is False
        assert result.error_code == TransactionErrorCode.PERMISSION_DENIED
        assert db_session.query(Transaction).count() == 0
        db_session.refresh(tracker)
        assert tracker.balance == Decimal("10")

    def test_unknown_tracker(self, service, owner):
        result = service.submit(12345, owner.id, "deposit", 10, now=NOW)

        assert result.error_code == TransactionErrorCode.TRACKER_NOT_FOUND

    @pytest.mark.parametrize(
        "tx_type, amount",
        [
            ("deposit", 0),
            ("deposit", "-3"),
            ("refund", 10),
            ("deposit", "1e30"),
            ("withdraw", "1e30"),
            ("deposit", "10000000000"),
        ],
    )
    def test_invalid_input(self, service, owner, make_tracker, tx_type, amount):
        tracker = make_tracker(owner)

        result = service.submit(tracker.id, owner.id, tx_type, amount, now=NOW)

        assert result.success is False
        assert result.error_code == TransactionErrorCode.INVALID_AMOUNT

    def test_storage_failure_rolls_back_everything(
        self, service, db_session, owner, make_tracker
    ):
        """스트릭 기록 중 DB 오류가 나면 잔액 변경과 거래 기록도 모두 rollback"""
        # Given
        tracker = make_tracker(owner, balance="5", streak_min_amount="10")

        # When
        with patch.object(
            service.streaks.streak_repo,
            "add_deposit",
            side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")),
        ):
            result = service.submit(tracker.id, owner.id, "deposit", 20, now=NOW)

        # Then
        assert result.success is False
        assert result.error_code == TransactionErrorCode.STORAGE_FAILURE
        assert db_session.query(Transaction).count() == 0
        db_session.refresh(tracker)
        assert tracker.balance == Decimal("5")


class TestTransactionQueries:
    def test_tracker_history_newest_first(self, service, owner, contributor, make_tracker):
        tracker = make_tracker(owner, contributors=[contributor])
        service.submit(tracker.id, owner.id, "deposit", 10, now=NOW)
        service.submit(tracker.id, contributor.id, "deposit", 20, now=NOW)

        history = service.get_tracker_transactions(tracker.id, owner.id)

        assert [entry.amount for entry in history] == [Decimal("20"), Decimal("10")]
        assert history[0].username == "bob"
        assert history[1].username == "alice"

    def test_tracker_history_requires_membership(self, service, owner, outsider, make_tracker):
        tracker = make_tracker(owner)

        with pytest.raises(AuthorizationError):
            service.get_tracker_transactions(tracker.id, outsider.id)

    def test_tracker_history_unknown_tracker(self, service, owner):
        with pytest.raises(TrackerNotFoundError):
            service.get_tracker_transactions(999, owner.id)

    def test_recent_transactions_span_trackers(self, service, owner, make_tracker):
        savings = make_tracker(owner, tracker_name="Savings")
        travel = make_tracker(owner, tracker_name="Travel")
        service.submit(savings.id, owner.id, "deposit", 10, now=NOW)
        service.submit(travel.id, owner.id, "deposit", 30, now=NOW)

        recent = service.get_recent_transactions(owner.id, limit=5)

        assert [entry.tracker_name for entry in recent] == ["Travel", "Savings"]

    def test_recent_transactions_without_trackers(self, service, outsider):
        assert service.get_recent_transactions(outsider.id) == []
