import pytest
from decimal import Decimal
from unittest.mock import Mock

from dependency_injector import providers
from fastapi.testclient import TestClient

from saveit.core.security import create_access_token
from saveit.main import create_app
from saveit.schemas.transaction import (
    StreakUpdate,
    TransactionEntry,
    TransactionErrorCode,
    TransactionResult,
)


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    """테스트 클라이언트 픽스처"""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": "user-owner"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mock_service(app):
    service = Mock()
    with app.container.services.transaction_service.override(providers.Object(service)):
        yield service


def sample_entry(**overrides) -> TransactionEntry:
    data = {
        "id": 1,
        "tracker_id": 7,
        "user_id": "user-owner",
        "type": "deposit",
        "amount": Decimal("55.00"),
        "note": None,
        "new_balance": Decimal("55.00"),
    }
    data.update(overrides)
    return TransactionEntry(**data)


class TestTransactionRoutes:
    """거래 라우터 테스트"""

    def test_submit_requires_token(self, client):
        response = client.post(
            "/api/v1/trackers/7/transactions", json={"type": "deposit", "amount": "10"}
        )

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_invalid_token(self, client):
        response = client.get(
            "/api/v1/transactions/recent", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    def test_submit_deposit(self, client, auth_headers, mock_service):
        # Given
        mock_service.submit.return_value = TransactionResult(
            success=True,
            transaction=sample_entry(),
            balance=Decimal("55.00"),
            streak=StreakUpdate(
                streak_activated=True,
                is_active_today=True,
                streak_days=1,
                amount_today=Decimal("55.00"),
            ),
            message="Transaction completed successfully",
        )

        # When
        response = client.post(
            "/api/v1/trackers/7/transactions",
            json={"type": "deposit", "amount": "55.00", "note": "coffee jar"},
            headers=auth_headers,
        )

        # Then
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["streak"]["streak_activated"] is True
        kwargs = mock_service.submit.call_args.kwargs
        assert kwargs["tracker_id"] == 7
        assert kwargs["user_id"] == "user-owner"
        assert kwargs["amount"] == Decimal("55.00")
        assert kwargs["note"] == "coffee jar"

    @pytest.mark.parametrize(
        "code, status_code",
        [
            (TransactionErrorCode.INVALID_AMOUNT, 422),
            (TransactionErrorCode.INSUFFICIENT_FUNDS, 400),
            (TransactionErrorCode.TRACKER_NOT_FOUND, 404),
            (TransactionErrorCode.PERMISSION_DENIED, 403),
            (TransactionErrorCode.STORAGE_FAILURE, 500),
        ],
    )
    def test_failure_codes_map_to_http(self, client, auth_headers, mock_service, code, status_code):
        mock_service.submit.return_value = TransactionResult(
            success=False, error_code=code, balance=Decimal("0"), message="failed"
        )

        response = client.post(
            "/api/v1/trackers/7/transactions",
            json={"type": "withdraw", "amount": "10"},
            headers=auth_headers,
        )

        assert response.status_code == status_code
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == code.value

    def test_unknown_type_rejected_by_schema(self, client, auth_headers, mock_service):
        response = client.post(
            "/api/v1/trackers/7/transactions",
            json={"type": "refund", "amount": "10"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_001"
        mock_service.submit.assert_not_called()

    def test_tracker_history(self, client, auth_headers, mock_service):
        mock_service.get_tracker_transactions.return_value = [
            sample_entry(id=2, username="alice"),
            sample_entry(id=1, username="bob"),
        ]

        response = client.get(
            "/api/v1/trackers/7/transactions?limit=20", headers=auth_headers
        )

        assert response.status_code == 200
        assert [row["username"] for row in response.json()] == ["alice", "bob"]
        mock_service.get_tracker_transactions.assert_called_once_with(
            7, "user-owner", limit=20
        )

    def test_recent_transactions(self, client, auth_headers, mock_service):
        mock_service.get_recent_transactions.return_value = [
            sample_entry(tracker_name="Vacation")
        ]

        response = client.get("/api/v1/transactions/recent", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()[0]["tracker_name"] == "Vacation"


class TestTransactionFlow:
    """실제 DB 세션을 사용하는 입출금 흐름"""

    def test_deposit_and_overdraw(self, app, client, db_session, owner, make_tracker):
        # Given
        tracker = make_tracker(owner)
        headers = {"Authorization": f"Bearer {create_access_token({'sub': owner.id})}"}

        with app.container.repositories.get_db.override(providers.Object(db_session)):
            # When
            deposit = client.post(
                f"/api/v1/trackers/{tracker.id}/transactions",
                json={"type": "deposit", "amount": "40"},
                headers=headers,
            )
            overdraw = client.post(
                f"/api/v1/trackers/{tracker.id}/transactions",
                json={"type": "withdraw", "amount": "40.01"},
                headers=headers,
            )
            history = client.get(
                f"/api/v1/trackers/{tracker.id}/transactions", headers=headers
            )

        # Then
        assert deposit.status_code == 201
        assert Decimal(deposit.json()["balance"]) == Decimal("40")
        assert overdraw.status_code == 400
        assert overdraw.json()["error"]["code"] == "INSUFFICIENT_FUNDS"
        assert len(history.json()) == 1
