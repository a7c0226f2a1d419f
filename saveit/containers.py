from dependency_injector import containers, providers

from saveit.database.session import get_db
from saveit.config import Settings
from saveit.services.goal_service import GoalService
from saveit.services.statistics_service import StatisticsService
from saveit.services.tracker_service import TrackerService
from saveit.services.transaction_service import TransactionService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class RepositoryModule(containers.DeclarativeContainer):
    """Database session."""

    get_db = providers.Resource(get_db)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies."""

    config = providers.DependenciesContainer()
    repositories = providers.DependenciesContainer()

    tracker_service = providers.Factory(TrackerService, db=repositories.get_db, settings=config.config)
    transaction_service = providers.Factory(TransactionService, db=repositories.get_db, settings=config.config)
    statistics_service = providers.Factory(StatisticsService, db=repositories.get_db)
    goal_service = providers.Factory(GoalService)


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "saveit.routers.health_router",
            "saveit.routers.tracker_router",
            "saveit.routers.transaction_router",
            "saveit.routers.goal_router",
            "saveit.routers.statistics_router",
        ],
    )

    config = providers.Container(ConfigModule)
    repositories = providers.Container(RepositoryModule)
    services = providers.Container(
        ServiceModule, config=config, repositories=repositories
    )
