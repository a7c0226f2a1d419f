import pytest
from decimal import Decimal
from unittest.mock import Mock

from dependency_injector import providers
from fastapi.testclient import TestClient

from saveit.core.exceptions import AuthorizationError, TrackerNotFoundError
from saveit.core.security import create_access_token
from saveit.main import create_app
from saveit.schemas.streak import (
    StreakBadge,
    StreakHistoryResponse,
    StreakRunEntry,
    StreakStatusResponse,
)
from saveit.schemas.tracker import TrackerMutationResponse, TrackerResponse


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": "user-owner"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mock_service(app):
    service = Mock()
    with app.container.services.tracker_service.override(providers.Object(service)):
        yield service


def sample_tracker(**overrides) -> TrackerResponse:
    data = {
        "id": 7,
        "owner_id": "user-owner",
        "tracker_name": "Vacation",
        "balance": Decimal("250.00"),
        "goal_enabled": True,
        "goal_amount": Decimal("1000.00"),
        "min_daily_amount": Decimal("10.00"),
        "streak_enabled": False,
        "streak_days": 0,
        "progress_percent": 25.0,
    }
    data.update(overrides)
    return TrackerResponse(**data)


class TestTrackerRoutes:
    """트래커 라우터 테스트"""

    def test_list_trackers(self, client, auth_headers, mock_service):
        mock_service.list_user_trackers.return_value = [sample_tracker()]

        response = client.get("/api/v1/trackers", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()[0]["progress_percent"] == 25.0
        mock_service.list_user_trackers.assert_called_once_with("user-owner")

    def test_create_tracker(self, client, auth_headers, mock_service):
        # Given
        mock_service.create_tracker.return_value = TrackerMutationResponse(
            success=True, tracker_id=7, skipped_usernames=["ghost"]
        )

        # When
        response = client.post(
            "/api/v1/trackers",
            json={
                "tracker_name": "Vacation",
                "streak": {"enabled": True, "min_amount": "20"},
                "contributors": ["bob", "ghost"],
            },
            headers=auth_headers,
        )

        # Then
        assert response.status_code == 201
        assert response.json()["skipped_usernames"] == ["ghost"]
        owner_id, config = mock_service.create_tracker.call_args.args
        assert owner_id == "user-owner"
        assert config.streak.min_amount == Decimal("20")

    def test_create_rejects_invalid_goal(self, client, auth_headers, mock_service):
        response = client.post(
            "/api/v1/trackers",
            json={
                "tracker_name": "Vacation",
                "goal": {"enabled": True, "amount": "1000"},
            },
            headers=auth_headers,
        )

        assert response.status_code == 422
        mock_service.create_tracker.assert_not_called()

    def test_get_tracker_not_found(self, client, auth_headers, mock_service):
        mock_service.get_tracker.side_effect = TrackerNotFoundError(99)

        response = client.get("/api/v1/trackers/99", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TRACKER_NOT_FOUND"

    def test_update_forbidden(self, client, auth_headers, mock_service):
        mock_service.update_tracker.side_effect = AuthorizationError(
            "Permission Denied: Only the owner can edit this tracker."
        )

        response = client.put(
            "/api/v1/trackers/7", json={"tracker_name": "Renamed"}, headers=auth_headers
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    def test_delete_tracker(self, client, auth_headers, mock_service):
        mock_service.delete_tracker.return_value = TrackerMutationResponse(
            success=True, tracker_id=7
        )

        response = client.delete("/api/v1/trackers/7", headers=auth_headers)

        assert response.status_code == 200
        mock_service.delete_tracker.assert_called_once_with(7, "user-owner")

    def test_contributors(self, client, auth_headers, mock_service):
        mock_service.get_contributors.return_value = ["bob", "carol"]

        response = client.get("/api/v1/trackers/7/contributors", headers=auth_headers)

        assert response.json() == ["bob", "carol"]

    def test_streak_status(self, client, auth_headers, mock_service):
        mock_service.get_streak_status.return_value = StreakStatusResponse(
            tracker_id=7,
            enabled=True,
            is_active_today=True,
            streak_days=12,
            streak_days_label="12 days",
            amount_today=Decimal("30"),
            min_amount=Decimal("20"),
            badge=StreakBadge(name="Bronze", emoji="🥉"),
        )

        response = client.get("/api/v1/trackers/7/streak", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["streak_days"] == 12
        assert data["badge"]["name"] == "Bronze"

    def test_streak_history(self, client, auth_headers, mock_service):
        mock_service.get_streak_history.return_value = StreakHistoryResponse(
            tracker_id=7,
            highest_streak_days=15,
            runs=[
                StreakRunEntry(
                    id=2, tracker_id=7, min_amount=Decimal("30"), status="ongoing",
                    streak_days=3, highest_streak_days=3,
                ),
                StreakRunEntry(
                    id=1, tracker_id=7, min_amount=Decimal("20"), status="lost",
                    streak_days=15, highest_streak_days=15,
                ),
            ],
        )

        response = client.get("/api/v1/trackers/7/streak/history", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["highest_streak_days"] == 15
        assert [run["status"] for run in data["runs"]] == ["ongoing", "lost"]
        mock_service.get_streak_history.assert_called_once_with(7, "user-owner")

    def test_streak_history_forbidden(self, client, auth_headers, mock_service):
        mock_service.get_streak_history.side_effect = AuthorizationError(
            "You are not a member of this tracker."
        )

        response = client.get("/api/v1/trackers/7/streak/history", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["success"] is False


class TestGoalAndStatisticsRoutes:
    def test_goal_calculator(self, client):
        response = client.post(
            "/api/v1/goals/calculate", json={"goal_amount": "1000", "min_amount": "100"}
        )

        assert response.status_code == 200
        assert response.json()["days_needed"] == 10

    def test_goal_calculator_input_error(self, client):
        response = client.post(
            "/api/v1/goals/calculate", json={"goal_amount": "1000"}
        )

        assert response.status_code == 200
        assert response.json()["is_error"] is True

    def test_statistics(self, app, client, db_session, owner, make_tracker):
        make_tracker(owner, balance="300", goal_amount="200")
        make_tracker(owner, balance="50", goal_amount="100")
        headers = {"Authorization": f"Bearer {create_access_token({'sub': owner.id})}"}

        with app.container.repositories.get_db.override(providers.Object(db_session)):
            response = client.get("/api/v1/statistics/me", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["tracker_count"] == 2
        assert Decimal(data["total_balance"]) == Decimal("350")
        assert data["goals_completed"] == 1
        assert data["highest_streak_days"] == 0

    def test_health(self, app, client, db_session):
        with app.container.repositories.get_db.override(providers.Object(db_session)):
            response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
