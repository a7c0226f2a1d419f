# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .profile_repository import ProfileRepository
from .tracker_repository import TrackerRepository
from .transaction_repository import TransactionRepository
from .streak_repository import StreakRepository
from .streak_run_repository import StreakRunRepository
from .contributor_repository import ContributorRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
    "TrackerRepository",
    "TransactionRepository",
    "StreakRepository",
    "StreakRunRepository",
    "ContributorRepository",
]
