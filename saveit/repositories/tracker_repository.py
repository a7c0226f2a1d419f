"""
트래커 리포지토리

잔액 변경은 조건부 UPDATE 한 문장으로 처리합니다:

    UPDATE trackers SET balance = balance + :delta
    WHERE id = :id AND balance + :delta >= 0

잔액 확인과 변경이 DB 에서 원자적으로 일어나므로 동시에 들어온 두 출금이
같은 (오래된) 잔액을 보고 둘 다 통과하는 일이 없습니다.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from saveit.models.tracker import Tracker, TrackerContributor
from saveit.repositories.base import BaseRepository
from saveit.schemas.tracker import TrackerResponse


class TrackerRepository(BaseRepository[Tracker, TrackerResponse]):
    def __init__(self, db: Session):
        super().__init__(Tracker, TrackerResponse, db)

    def apply_balance_delta(
        self, tracker_id: int, delta: Decimal, max_balance: Optional[Decimal] = None
    ) -> Optional[Decimal]:
        """
        잔액에 delta 를 원자적으로 적용

        Returns:
            Optional[Decimal]: 변경 후 잔액.
            트래커가 없거나 잔액이 음수 또는 max_balance 초과가 되는 경우 None

        Note:
            commit 하지 않습니다. 호출한 서비스가 트랜잭션 경계를 관리합니다.
        """
        stmt = (
            update(Tracker)
            .where(Tracker.id == tracker_id, Tracker.balance + delta >= 0)
        )
        if max_balance is not None:
            stmt = stmt.where(Tracker.balance + delta <= max_balance)
        stmt = (
            stmt.values(balance=Tracker.balance + delta)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if result.rowcount == 0:
            return None

        instance = self.db.get(Tracker, tracker_id)
        self.db.refresh(instance)
        return instance.balance

    def get_balance(self, tracker_id: int) -> Optional[Decimal]:
        balance = (
            self.db.query(Tracker.balance).filter(Tracker.id == tracker_id).scalar()
        )
        return balance

    def list_for_user(self, user_id: str) -> List[Tracker]:
        """사용자가 멤버(owner 포함)로 등록된 모든 트래커 (생성순)"""
        return (
            self.db.query(Tracker)
            .join(TrackerContributor, TrackerContributor.tracker_id == Tracker.id)
            .filter(TrackerContributor.user_id == user_id)
            .order_by(Tracker.created_at.asc(), Tracker.id.asc())
            .all()
        )

    def set_streak_state(
        self, tracker: Tracker, streak_days: int, last_check: Optional[date]
    ) -> Tracker:
        tracker.streak_days = streak_days
        tracker.last_streak_check = last_check
        self.db.add(tracker)
        self.db.flush()
        return tracker

    def delete(self, tracker: Tracker) -> None:
        """트래커 삭제 - 거래/스트릭 로그/멤버십은 cascade 로 함께 삭제"""
        self.db.delete(tracker)
        self.db.flush()
