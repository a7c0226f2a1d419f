from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends

from saveit.containers import Container
from saveit.core.security import verify_token
from saveit.schemas.statistics import UserSavingsStatistics
from saveit.services.statistics_service import StatisticsService

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("/me", response_model=UserSavingsStatistics)
@inject
async def get_my_statistics(
    user_id: str = Depends(verify_token),
    statistics_service: StatisticsService = Depends(
        Provide[Container.services.statistics_service]
    ),
) -> UserSavingsStatistics:
    """내 저축 통계"""
    return statistics_service.get_user_statistics(user_id)
