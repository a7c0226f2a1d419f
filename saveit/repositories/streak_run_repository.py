from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from saveit.models.streak import StreakRun, StreakRunStatus
from saveit.repositories.base import BaseRepository
from saveit.schemas.streak import StreakRunEntry


class StreakRunRepository(BaseRepository[StreakRun, StreakRunEntry]):
    """스트릭 기록 리포지토리 - 트래커당 ongoing 기록은 최대 하나"""

    def __init__(self, db: Session):
        super().__init__(StreakRun, StreakRunEntry, db)

    def get_ongoing(self, tracker_id: int) -> Optional[StreakRun]:
        return (
            self.db.query(StreakRun)
            .filter(
                StreakRun.tracker_id == tracker_id,
                StreakRun.status == StreakRunStatus.ONGOING.value,
            )
            .order_by(StreakRun.id.desc())
            .first()
        )

    def start(self, tracker_id: int, min_amount: Decimal) -> StreakRun:
        """
        ongoing 기록 시작

        이미 ongoing 기록이 있으면 최소 금액만 갱신해 그대로 사용합니다.
        commit 하지 않습니다.
        """
        run = self.get_ongoing(tracker_id)
        if run is None:
            run = StreakRun(
                tracker_id=tracker_id,
                min_amount=min_amount,
                status=StreakRunStatus.ONGOING.value,
                streak_days=0,
                highest_streak_days=0,
            )
            self.db.add(run)
        else:
            run.min_amount = min_amount
        self.db.flush()
        return run

    def mark_lost(self, tracker_id: int, ended_at: datetime) -> Optional[StreakRun]:
        """ongoing 기록을 lost 로 마감 - 달성한 streak_days 는 유지"""
        run = self.get_ongoing(tracker_id)
        if run is None:
            return None
        run.status = StreakRunStatus.LOST.value
        run.ended_at = ended_at
        self.db.flush()
        return run

    def list_for_tracker(self, tracker_id: int) -> List[StreakRunEntry]:
        instances = (
            self.db.query(StreakRun)
            .filter(StreakRun.tracker_id == tracker_id)
            .order_by(StreakRun.id.desc())
            .all()
        )
        return [self._to_schema(instance) for instance in instances]
