"""
트래커 API 라우터

- GET /trackers: 내가 속한 트래커 목록
- POST /trackers: 트래커 생성
- GET /trackers/{tracker_id}: 트래커 상세
- PUT /trackers/{tracker_id}: 트래커 설정 수정 (owner)
- DELETE /trackers/{tracker_id}: 트래커 삭제 (owner)
- GET /trackers/{tracker_id}/contributors: 기여자 username 목록
- GET /trackers/{tracker_id}/streak: 스트릭 상태
- GET /trackers/{tracker_id}/streak/history: 스트릭 기록

모든 엔드포인트는 Bearer 토큰 인증이 필요합니다.
"""

import logging
from typing import List

from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends, Path

from saveit.containers import Container
from saveit.core.security import verify_token
from saveit.schemas.streak import StreakHistoryResponse, StreakStatusResponse
from saveit.schemas.tracker import (
    TrackerConfig,
    TrackerMutationResponse,
    TrackerResponse,
)
from saveit.services.tracker_service import TrackerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trackers", tags=["trackers"])


@router.get("", response_model=List[TrackerResponse])
@inject
async def list_my_trackers(
    user_id: str = Depends(verify_token),
    tracker_service: TrackerService = Depends(Provide[Container.services.tracker_service]),
) -> List[TrackerResponse]:
    """내가 owner 또는 contributor 인 트래커 목록"""
    return tracker_service.list_user_trackers(user_id)


@router.post("", response_model=TrackerMutationResponse, status_code=201)
@inject
async def create_tracker(
    config: TrackerConfig,
    user_id: str = Depends(verify_token),
    tracker_service: TrackerService = Depends(Provide[Container.services.tracker_service]),
) -> TrackerMutationResponse:
    """
    트래커 생성

    잔액 0, 스트릭 0 으로 시작합니다.
    존재하지 않는 기여자 username 은 제외되고 skipped_usernames 로 돌려줍니다.

    HTTP Status:
        201: 생성 완료
        401: 인증 실패
        422: 설정 검증 실패
    """
    return tracker_service.create_tracker(user_id, config)


@router.get("/{tracker_id}", response_model=TrackerResponse)
@inject
async def get_tracker(
    tracker_id: int = Path(..., description="트래커 ID"),
    user_id: str = Depends(verify_token),
    tracker_service: TrackerService = Depends(Provide[Container.services.tracker_service]),
) -> TrackerResponse:
    return tracker_service.get_tracker(tracker_id, user_id)


@router.put("/{tracker_id}", response_model=TrackerMutationResponse)
@inject
async def update_tracker(
    config: TrackerConfig,
    tracker_id: int = Path(..., description="트래커 ID"),
    user_id: str = Depends(verify_token),
    tracker_service: TrackerService = Depends(Provide[Container.services.tracker_service]),
) -> TrackerMutationResponse:
    """
    트래커 설정 수정 (owner 전용)

    스트릭을 끄거나 최소 금액을 바꾸면 기존 스트릭 기록이 삭제됩니다.

    HTTP Status:
        200: 수정 완료
        403: owner 가 아님
        404: 트래커 없음
    """
    return tracker_service.update_tracker(tracker_id, user_id, config)


@router.delete("/{tracker_id}", response_model=TrackerMutationResponse)
@inject
async def delete_tracker(
    tracker_id: int = Path(..., description="트래커 ID"),
    user_id: str = Depends(verify_token),
    tracker_service: TrackerService = Depends(Provide[Container.services.tracker_service]),
) -> TrackerMutationResponse:
    """트래커 삭제 (owner 전용) - 거래 내역과 스트릭 기록도 함께 삭제"""
    return tracker_service.delete_tracker(tracker_id, user_id)


@router.get("/{tracker_id}/contributors", response_model=List[str])
@inject
async def get_contributors(
    tracker_id: int = Path(..., description="트래커 ID"),
    user_id: str = Depends(verify_token),
    tracker_service: TrackerService = Depends(Provide[Container.services.tracker_service]),
) -> List[str]:
    return tracker_service.get_contributors(tracker_id, user_id)


@router.get("/{tracker_id}/streak", response_model=StreakStatusResponse)
@inject
async def get_streak_status(
    tracker_id: int = Path(..., description="트래커 ID"),
    user_id: str = Depends(verify_token),
    tracker_service: TrackerService = Depends(Provide[Container.services.tracker_service]),
) -> StreakStatusResponse:
    """
    스트릭 상태 조회

    조회 시점을 기준으로 연속 일수를 다시 계산해 저장합니다.
    어제 활동이 없었다면 연속 일수는 0 으로 초기화됩니다.
    """
    return tracker_service.get_streak_status(tracker_id, user_id)


@router.get("/{tracker_id}/streak/history", response_model=StreakHistoryResponse)
@inject
async def get_streak_history(
    tracker_id: int = Path(..., description="트래커 ID"),
    user_id: str = Depends(verify_token),
    tracker_service: TrackerService = Depends(Provide[Container.services.tracker_service]),
) -> StreakHistoryResponse:
    """
    스트릭 기록 조회

    스트릭을 켤 때마다 새 기록이 시작되고, 끄거나 최소 금액을 바꾸면 lost 로 마감됩니다.
    최고 연속 일수는 스트릭이 초기화되어도 유지됩니다.
    """
    return tracker_service.get_streak_history(tracker_id, user_id)
