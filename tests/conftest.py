import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from saveit.config import Settings
from saveit.models import (
    Base,
    ContributorRole,
    Profile,
    Tracker,
    TrackerContributor,
)


@pytest.fixture
def engine():
    """테스트용 인메모리 SQLite 엔진"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_settings():
    return Settings(STREAK_TIMEZONE="UTC", DATABASE_URL="sqlite://")


@pytest.fixture
def make_profile(db_session):
    def _make_profile(user_id: str, username: str = None) -> Profile:
        profile = Profile(
            id=user_id,
            username=username or user_id,
            email=f"{user_id}@example.com",
        )
        db_session.add(profile)
        db_session.commit()
        return profile

    return _make_profile


@pytest.fixture
def make_tracker(db_session):
    """트래커와 owner / contributor 멤버십 생성"""

    def _make_tracker(
        owner: Profile,
        contributors=(),
        balance="0",
        streak_min_amount=None,
        streak_days=0,
        goal_amount=None,
        tracker_name="Emergency Fund",
    ) -> Tracker:
        tracker = Tracker(
            owner_id=owner.id,
            tracker_name=tracker_name,
            balance=Decimal(balance),
            streak_enabled=streak_min_amount is not None,
            streak_min_amount=(
                Decimal(streak_min_amount) if streak_min_amount is not None else None
            ),
            streak_days=streak_days,
            goal_enabled=goal_amount is not None,
            goal_amount=Decimal(goal_amount) if goal_amount is not None else None,
            min_daily_amount=Decimal("10") if goal_amount is not None else None,
        )
        db_session.add(tracker)
        db_session.flush()

        db_session.add(
            TrackerContributor(
                tracker_id=tracker.id,
                user_id=owner.id,
                username=owner.username,
                role=ContributorRole.OWNER.value,
            )
        )
        for profile in contributors:
            db_session.add(
                TrackerContributor(
                    tracker_id=tracker.id,
                    user_id=profile.id,
                    username=profile.username,
                    role=ContributorRole.CONTRIBUTOR.value,
                )
            )
        db_session.commit()
        return tracker

    return _make_tracker


@pytest.fixture
def owner(make_profile):
    return make_profile("user-owner", "alice")


@pytest.fixture
def contributor(make_profile):
    return make_profile("user-contrib", "bob")


@pytest.fixture
def outsider(make_profile):
    return make_profile("user-outsider", "mallory")
