from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from saveit.models.streak import StreakLog
from saveit.repositories.base import BaseRepository
from saveit.schemas.streak import StreakLogEntry


class StreakRepository(BaseRepository[StreakLog, StreakLogEntry]):
    """
    일별 스트릭 로그 리포지토리

    (tracker_id, user_id, date) 유니크 제약으로 하루 한 행만 유지됩니다.
    """

    def __init__(self, db: Session):
        super().__init__(StreakLog, StreakLogEntry, db)

    def get_log(self, tracker_id: int, user_id: str, day: date) -> Optional[StreakLog]:
        return (
            self.db.query(StreakLog)
            .filter(
                StreakLog.tracker_id == tracker_id,
                StreakLog.user_id == user_id,
                StreakLog.date == day,
            )
            .first()
        )

    def add_deposit(
        self,
        tracker_id: int,
        user_id: str,
        day: date,
        amount: Decimal,
        min_amount: Decimal,
        now: datetime,
    ) -> Tuple[StreakLog, bool]:
        """
        오늘 로그에 입금액을 누적 (upsert)

        Returns:
            (로그, 이번 입금으로 새로 활성화되었는지)

        Note:
            이미 활성화된 날은 다시 비활성으로 돌아가지 않으며 activated_at 도 유지됩니다.
            commit 하지 않습니다.
        """
        log = self.get_log(tracker_id, user_id, day)
        if log is None:
            log = StreakLog(
                tracker_id=tracker_id,
                user_id=user_id,
                date=day,
                amount_deposited=Decimal("0"),
                is_active=False,
            )
            self.db.add(log)

        log.amount_deposited = Decimal(log.amount_deposited or 0) + amount

        newly_activated = False
        if not log.is_active and log.amount_deposited >= min_amount:
            log.is_active = True
            log.activated_at = now
            newly_activated = True

        self.db.flush()
        return log, newly_activated

    def is_day_active(self, tracker_id: int, day: date) -> bool:
        """해당 날짜에 트래커 멤버 중 누구라도 활성화했는지"""
        return (
            self.db.query(StreakLog.id)
            .filter(
                StreakLog.tracker_id == tracker_id,
                StreakLog.date == day,
                StreakLog.is_active.is_(True),
            )
            .first()
            is not None
        )

    def active_days(
        self, tracker_id: int, up_to: date, limit: Optional[int] = None
    ) -> List[date]:
        """up_to 이전(포함) 활성화된 날짜 목록 (최신순, 중복 제거). limit 이 없으면 전체"""
        query = (
            self.db.query(StreakLog.date)
            .filter(
                StreakLog.tracker_id == tracker_id,
                StreakLog.date <= up_to,
                StreakLog.is_active.is_(True),
            )
            .distinct()
            .order_by(StreakLog.date.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [row[0] for row in query.all()]

    def list_for_tracker(
        self, tracker_id: int, limit: Optional[int] = None
    ) -> List[StreakLogEntry]:
        query = (
            self.db.query(StreakLog)
            .filter(StreakLog.tracker_id == tracker_id)
            .order_by(StreakLog.date.desc(), StreakLog.id.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_schema(instance) for instance in query.all()]

    def delete_for_tracker(self, tracker_id: int) -> int:
        """트래커의 모든 스트릭 로그 삭제 - 되돌릴 수 없음"""
        deleted = (
            self.db.query(StreakLog)
            .filter(StreakLog.tracker_id == tracker_id)
            .delete()
        )
        self.db.flush()
        return deleted
