"""
잔액 원장 서비스 (Balance Ledger)

입금은 잔액을 무조건 증가시키고, 출금은 잔액이 충분할 때만 차감합니다.
잔액 확인과 차감은 TrackerRepository.apply_balance_delta 의 조건부 UPDATE 한 문장으로
처리되어 동시 출금에도 잔액이 음수가 되지 않습니다.

이 서비스는 commit 하지 않습니다. 트랜잭션 경계는 TransactionService 가 관리합니다.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from sqlalchemy.orm import Session

from saveit.models.transaction import TransactionType
from saveit.repositories.tracker_repository import TrackerRepository
from saveit.repositories.transaction_repository import TransactionRepository
from saveit.schemas.transaction import LedgerResult, TransactionErrorCode

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# Numeric(12, 2) 컬럼에 저장 가능한 최대 금액
MAX_AMOUNT = Decimal("9999999999.99")


def normalize_amount(amount: Any) -> Optional[Decimal]:
    """
    금액을 Decimal 로 정규화

    Returns:
        Optional[Decimal]: 0보다 크고 MAX_AMOUNT 이하이며 소수점 둘째 자리 이내인 금액, 아니면 None
    """
    if amount is None or isinstance(amount, bool):
        return None
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        if not value.is_finite() or value <= 0 or value > MAX_AMOUNT:
            return None
        quantized = value.quantize(CENT)
    except (InvalidOperation, ValueError):
        return None

    if value != quantized:
        return None
    return quantized


class LedgerService:
    def __init__(self, db: Session):
        self.db = db
        self.tracker_repo = TrackerRepository(db)
        self.transaction_repo = TransactionRepository(db)

    def apply_transaction(
        self,
        tracker_id: int,
        user_id: str,
        type: TransactionType,
        amount: Any,
        note: Optional[str] = None,
    ) -> LedgerResult:
        """입금/출금을 잔액에 적용하고 원장에 기록

        Args:
            tracker_id: 트래커 ID
            user_id: 거래하는 사용자 ID
            type: deposit 또는 withdraw
            amount: 금액 (0보다 커야 함)
            note: 메모

        Returns:
            LedgerResult: 성공 시 생성된 거래와 변경 후 잔액,
            실패 시 INVALID_AMOUNT / INSUFFICIENT_FUNDS / TRACKER_NOT_FOUND
        """
        value = normalize_amount(amount)
        if value is None:
            return LedgerResult(
                success=False,
                error_code=TransactionErrorCode.INVALID_AMOUNT,
                message=(
                    "Amount must be a positive value with at most two decimal places "
                    f"and no more than {MAX_AMOUNT}."
                ),
            )

        tx_type = TransactionType(type)
        delta = value if tx_type == TransactionType.DEPOSIT else -value

        new_balance = self.tracker_repo.apply_balance_delta(
            tracker_id, delta, max_balance=MAX_AMOUNT
        )
        if new_balance is None:
            current_balance = self.tracker_repo.get_balance(tracker_id)
            if current_balance is None:
                return LedgerResult(
                    success=False,
                    error_code=TransactionErrorCode.TRACKER_NOT_FOUND,
                    message="Tracker not found.",
                )

            if tx_type == TransactionType.DEPOSIT:
                logger.warning(
                    f"Rejected deposit of {value} on tracker {tracker_id}: balance {current_balance} would exceed {MAX_AMOUNT}"
                )
                return LedgerResult(
                    success=False,
                    error_code=TransactionErrorCode.INVALID_AMOUNT,
                    balance=current_balance,
                    message=f"Balance cannot exceed {MAX_AMOUNT}.",
                )

            logger.warning(
                f"Rejected withdraw of {value} on tracker {tracker_id}: balance {current_balance}"
            )
            return LedgerResult(
                success=False,
                error_code=TransactionErrorCode.INSUFFICIENT_FUNDS,
                balance=current_balance,
                message="Insufficient funds for this withdrawal.",
            )

        entry = self.transaction_repo.append(
            tracker_id=tracker_id,
            user_id=user_id,
            type=tx_type,
            amount=value,
            new_balance=new_balance,
            note=note,
        )

        return LedgerResult(
            success=True,
            transaction=entry,
            balance=new_balance,
            message="Transaction completed successfully",
        )
