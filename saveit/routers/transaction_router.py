"""
거래 API 라우터

- POST /trackers/{tracker_id}/transactions: 입금/출금
- GET /trackers/{tracker_id}/transactions: 트래커 거래 내역
- GET /transactions/recent: 내가 속한 트래커들의 최근 거래
"""

import logging
from typing import List

from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends, Path, Query

from saveit.containers import Container
from saveit.core.exceptions import (
    AuthorizationError,
    InsufficientBalanceError,
    InternalServerError,
    TrackerNotFoundError,
    ValidationError,
)
from saveit.core.security import verify_token
from saveit.schemas.transaction import (
    TransactionEntry,
    TransactionErrorCode,
    TransactionRequest,
    TransactionResult,
)
from saveit.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions"])


def raise_for_result(tracker_id: int, result: TransactionResult) -> None:
    """실패한 TransactionResult 를 HTTP 예외로 변환"""
    if result.success:
        return

    code = result.error_code
    if code == TransactionErrorCode.INVALID_AMOUNT:
        raise ValidationError(result.message, error_code=code.value)
    if code == TransactionErrorCode.INSUFFICIENT_FUNDS:
        details = {"balance": str(result.balance)} if result.balance is not None else None
        raise InsufficientBalanceError(details=details)
    if code == TransactionErrorCode.TRACKER_NOT_FOUND:
        raise TrackerNotFoundError(tracker_id)
    if code == TransactionErrorCode.PERMISSION_DENIED:
        raise AuthorizationError(result.message)
    raise InternalServerError(result.message, error_code=TransactionErrorCode.STORAGE_FAILURE.value)


@router.post(
    "/trackers/{tracker_id}/transactions",
    response_model=TransactionResult,
    status_code=201,
)
@inject
async def submit_transaction(
    request: TransactionRequest,
    tracker_id: int = Path(..., description="트래커 ID"),
    user_id: str = Depends(verify_token),
    transaction_service: TransactionService = Depends(
        Provide[Container.services.transaction_service]
    ),
) -> TransactionResult:
    """
    입금/출금 처리

    잔액 변경, 거래 기록, (입금 시) 스트릭 누적이 하나의 트랜잭션으로 처리됩니다.

    HTTP Status:
        201: 처리 완료 (streak.streak_activated 로 오늘 스트릭 달성 여부 확인)
        400: 잔액 부족 (INSUFFICIENT_FUNDS)
        403: 트래커 멤버가 아님 (PERMISSION_DENIED)
        404: 트래커 없음 (TRACKER_NOT_FOUND)
        422: 잘못된 금액 (INVALID_AMOUNT)
        500: 저장 실패 (STORAGE_FAILURE)
    """
    result = transaction_service.submit(
        tracker_id=tracker_id,
        user_id=user_id,
        type=request.type,
        amount=request.amount,
        note=request.note,
    )
    raise_for_result(tracker_id, result)
    return result


@router.get(
    "/trackers/{tracker_id}/transactions",
    response_model=List[TransactionEntry],
)
@inject
async def get_tracker_transactions(
    tracker_id: int = Path(..., description="트래커 ID"),
    limit: int = Query(100, ge=1, le=100, description="최대 조회 건수"),
    user_id: str = Depends(verify_token),
    transaction_service: TransactionService = Depends(
        Provide[Container.services.transaction_service]
    ),
) -> List[TransactionEntry]:
    """트래커 거래 내역 (최신순)"""
    return transaction_service.get_tracker_transactions(tracker_id, user_id, limit=limit)


@router.get("/transactions/recent", response_model=List[TransactionEntry])
@inject
async def get_recent_transactions(
    limit: int = Query(10, ge=1, le=50, description="최대 조회 건수"),
    user_id: str = Depends(verify_token),
    transaction_service: TransactionService = Depends(
        Provide[Container.services.transaction_service]
    ),
) -> List[TransactionEntry]:
    """내가 속한 모든 트래커의 최근 거래 (대시보드용)"""
    return transaction_service.get_recent_transactions(user_id, limit=limit)
