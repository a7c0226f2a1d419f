"""
거래 처리 서비스 (Transaction Orchestrator)

입금/출금 한 건을 하나의 DB 트랜잭션으로 처리합니다:

1. 트래커 존재 및 멤버십(owner 또는 contributor) 확인
2. 금액 검증 후 잔액 원장 적용 (LedgerService)
3. 입금이고 스트릭이 켜져 있으면 스트릭 로그 누적 및 연속 일수 재계산 (StreakService)
4. commit

어느 단계에서든 실패하면 rollback 하고 실패 코드를 결과로 반환합니다.
자동 재시도는 하지 않습니다 - 재요청은 호출자가 명시적으로 해야 하며 멱등성은 보장되지 않습니다.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from saveit.config import Settings, settings as default_settings
from saveit.core.exceptions import AuthorizationError, TrackerNotFoundError
from saveit.models.tracker import Tracker
from saveit.models.transaction import TransactionType
from saveit.repositories.contributor_repository import ContributorRepository
from saveit.repositories.tracker_repository import TrackerRepository
from saveit.repositories.transaction_repository import TransactionRepository
from saveit.schemas.transaction import (
    TransactionEntry,
    TransactionErrorCode,
    TransactionResult,
)
from saveit.services.ledger_service import LedgerService
from saveit.services.streak_service import StreakService

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or default_settings
        self.tracker_repo = TrackerRepository(db)
        self.contributor_repo = ContributorRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.ledger = LedgerService(db)
        self.streaks = StreakService(db, settings=self.settings)

    def submit(
        self,
        tracker_id: int,
        user_id: str,
        type: Any,
        amount: Any,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransactionResult:
        """입금/출금 처리

        Args:
            tracker_id: 트래커 ID
            user_id: 요청한 사용자 ID (인증 계층에서 전달)
            type: deposit 또는 withdraw
            amount: 금액
            note: 메모
            now: 기준 시각 (기본: 현재 UTC)

        Returns:
            TransactionResult: 성공 시 거래/잔액/스트릭 결과,
            실패 시 error_code (INVALID_AMOUNT, INSUFFICIENT_FUNDS, TRACKER_NOT_FOUND,
            PERMISSION_DENIED, STORAGE_FAILURE)
        """
        try:
            tx_type = TransactionType(type)
        except ValueError:
            return TransactionResult(
                success=False,
                error_code=TransactionErrorCode.INVALID_AMOUNT,
                message=f"Unknown transaction type: {type}",
            )

        try:
            tracker = self.tracker_repo.get_model(tracker_id)
            if tracker is None:
                return self._fail(TransactionErrorCode.TRACKER_NOT_FOUND, "Tracker not found.")

            if not self._is_member(tracker, user_id):
                logger.warning(
                    f"User {user_id} attempted {tx_type.value} on tracker {tracker_id} without membership"
                )
                return self._fail(
                    TransactionErrorCode.PERMISSION_DENIED,
                    "Only the owner or a contributor can use this tracker.",
                )

            ledger_result = self.ledger.apply_transaction(
                tracker_id=tracker.id,
                user_id=user_id,
                type=tx_type,
                amount=amount,
                note=note,
            )
            if not ledger_result.success:
                self.db.rollback()
                return TransactionResult(
                    success=False,
                    error_code=ledger_result.error_code,
                    balance=ledger_result.balance,
                    message=ledger_result.message,
                )

            streak = None
            if tx_type == TransactionType.DEPOSIT:
                streak = self.streaks.record_deposit(
                    tracker, user_id, ledger_result.transaction.amount, now=now
                )

            self.db.commit()

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Transaction failed for tracker {tracker_id} (user {user_id}): {str(e)}"
            )
            return TransactionResult(
                success=False,
                error_code=TransactionErrorCode.STORAGE_FAILURE,
                message=f"Transaction failed: {str(e)}",
            )

        logger.info(
            f"{tx_type.value} of {ledger_result.transaction.amount} on tracker {tracker_id} "
            f"by user {user_id}, balance {ledger_result.balance}"
        )
        return TransactionResult(
            success=True,
            transaction=ledger_result.transaction,
            balance=ledger_result.balance,
            streak=streak,
            message="Transaction completed successfully",
        )

    def get_tracker_transactions(
        self, tracker_id: int, user_id: str, limit: Optional[int] = None
    ) -> List[TransactionEntry]:
        """트래커 거래 내역 (멤버만 조회 가능)"""
        tracker = self.tracker_repo.get_model(tracker_id)
        if tracker is None:
            raise TrackerNotFoundError(tracker_id)
        if not self._is_member(tracker, user_id):
            raise AuthorizationError("Only tracker members can view transactions.")

        limit = min(limit or self.settings.TRANSACTION_HISTORY_LIMIT, self.settings.TRANSACTION_HISTORY_LIMIT)
        return self.transaction_repo.list_for_tracker(tracker_id, limit=limit)

    def get_recent_transactions(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[TransactionEntry]:
        """사용자가 속한 모든 트래커의 최근 거래"""
        tracker_ids = self.contributor_repo.tracker_ids_for_user(user_id)
        return self.transaction_repo.list_recent_for_trackers(
            tracker_ids, limit=limit or self.settings.RECENT_TRANSACTIONS_LIMIT
        )

    def _is_member(self, tracker: Tracker, user_id: str) -> bool:
        if tracker.owner_id == user_id:
            return True
        return self.contributor_repo.get_role(tracker.id, user_id) is not None

    def _fail(self, code: TransactionErrorCode, message: str) -> TransactionResult:
        return TransactionResult(success=False, error_code=code, message=message)
