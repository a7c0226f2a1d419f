"""
거래 원장 리포지토리

거래 레코드는 추가만 가능합니다. 수정/삭제 메서드는 제공하지 않습니다.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from saveit.models.profile import Profile
from saveit.models.tracker import Tracker
from saveit.models.transaction import Transaction, TransactionType
from saveit.repositories.base import BaseRepository
from saveit.schemas.transaction import TransactionEntry


class TransactionRepository(BaseRepository[Transaction, TransactionEntry]):
    def __init__(self, db: Session):
        super().__init__(Transaction, TransactionEntry, db)

    def append(
        self,
        tracker_id: int,
        user_id: str,
        type: TransactionType,
        amount: Decimal,
        new_balance: Decimal,
        note: Optional[str] = None,
    ) -> TransactionEntry:
        """원장에 거래 한 건 추가 (commit 하지 않음)"""
        instance = self.create(
            commit=False,
            tracker_id=tracker_id,
            user_id=user_id,
            type=TransactionType(type).value,
            amount=amount,
            note=note,
            new_balance=new_balance,
        )
        return self._to_schema(instance)

    def list_for_tracker(self, tracker_id: int, limit: int = 100) -> List[TransactionEntry]:
        """트래커 거래 내역 (최신순, 거래자 username 포함)"""
        rows = (
            self.db.query(Transaction, Profile.username)
            .outerjoin(Profile, Profile.id == Transaction.user_id)
            .filter(Transaction.tracker_id == tracker_id)
            .order_by(desc(Transaction.created_at), desc(Transaction.id))
            .limit(limit)
            .all()
        )
        return [self._entry(tx, username=username) for tx, username in rows]

    def list_recent_for_trackers(
        self, tracker_ids: List[int], limit: int = 10
    ) -> List[TransactionEntry]:
        """여러 트래커에 걸친 최근 거래 (트래커 이름 포함)"""
        if not tracker_ids:
            return []

        rows = (
            self.db.query(Transaction, Profile.username, Tracker.tracker_name)
            .join(Tracker, Tracker.id == Transaction.tracker_id)
            .outerjoin(Profile, Profile.id == Transaction.user_id)
            .filter(Transaction.tracker_id.in_(tracker_ids))
            .order_by(desc(Transaction.created_at), desc(Transaction.id))
            .limit(limit)
            .all()
        )
        return [
            self._entry(tx, username=username, tracker_name=tracker_name)
            for tx, username, tracker_name in rows
        ]

    def totals_for_user(self, user_id: str) -> Dict[str, Decimal]:
        """사용자 본인의 유형별 거래 합계"""
        rows = (
            self.db.query(Transaction.type, func.sum(Transaction.amount))
            .filter(Transaction.user_id == user_id)
            .group_by(Transaction.type)
            .all()
        )
        totals = {t.value: Decimal("0") for t in TransactionType}
        for tx_type, total in rows:
            totals[tx_type] = Decimal(str(total or 0))
        return totals

    def _entry(self, instance: Transaction, **extra) -> TransactionEntry:
        entry = self._to_schema(instance)
        return entry.model_copy(update=extra)
