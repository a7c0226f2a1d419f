from .tracker import TrackerConfig, TrackerResponse
from .transaction import TransactionRequest, TransactionResult, TransactionErrorCode
from .streak import StreakHistoryResponse, StreakStatusResponse
from .goal import GoalCalculation, GoalCalculationRequest
from .statistics import UserSavingsStatistics
