from saveit.models.base import Base
from saveit.models.profile import Profile
from saveit.models.tracker import ContributorRole, Tracker, TrackerContributor
from saveit.models.transaction import Transaction, TransactionType
from saveit.models.streak import StreakLog, StreakRun, StreakRunStatus

__all__ = [
    "Base",
    "Profile",
    "ContributorRole",
    "Tracker",
    "TrackerContributor",
    "Transaction",
    "TransactionType",
    "StreakLog",
    "StreakRun",
    "StreakRunStatus",
]
