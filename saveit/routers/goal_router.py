from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends

from saveit.containers import Container
from saveit.schemas.goal import GoalCalculation, GoalCalculationRequest
from saveit.services.goal_service import GoalService

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("/calculate", response_model=GoalCalculation)
@inject
async def calculate_goal(
    request: GoalCalculationRequest,
    goal_service: GoalService = Depends(Provide[Container.services.goal_service]),
) -> GoalCalculation:
    """
    목표 계산기

    입력 오류도 200 으로 응답하고 is_error / message 로 알려줍니다.
    """
    return goal_service.calculate(
        goal_amount=request.goal_amount,
        min_amount=request.min_amount,
        target_date=request.target_date,
    )
