import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from saveit.models.transaction import TransactionType
from saveit.repositories.tracker_repository import TrackerRepository
from saveit.repositories.transaction_repository import TransactionRepository
from saveit.schemas.statistics import UserSavingsStatistics

logger = logging.getLogger(__name__)


class StatisticsService:
    """사용자 저축 통계 집계"""

    def __init__(self, db: Session):
        self.db = db
        self.tracker_repo = TrackerRepository(db)
        self.transaction_repo = TransactionRepository(db)

    def get_user_statistics(self, user_id: str) -> UserSavingsStatistics:
        trackers = self.tracker_repo.list_for_user(user_id)
        totals = self.transaction_repo.totals_for_user(user_id)
        transaction_count = self.transaction_repo.count({"user_id": user_id})

        total_balance = sum((Decimal(t.balance or 0) for t in trackers), Decimal("0"))
        best_streak = max(
            (t.streak_days or 0 for t in trackers if t.streak_enabled), default=0
        )
        highest_streak = max(
            (max(t.highest_streak_days or 0, t.streak_days or 0) for t in trackers),
            default=0,
        )
        goals_completed = sum(
            1
            for t in trackers
            if t.goal_enabled and t.goal_amount and t.balance >= t.goal_amount
        )

        stats = UserSavingsStatistics(
            user_id=user_id,
            tracker_count=len(trackers),
            total_balance=total_balance,
            total_deposited=totals[TransactionType.DEPOSIT.value],
            total_withdrawn=totals[TransactionType.WITHDRAW.value],
            transaction_count=transaction_count,
            best_streak_days=best_streak,
            highest_streak_days=highest_streak,
            goals_completed=goals_completed,
        )
        logger.info(
            f"Computed statistics for user {user_id}: {stats.tracker_count} trackers"
        )
        return stats
