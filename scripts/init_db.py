import logging
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from saveit.config import settings
from saveit.database.connection import engine
from saveit.logging_config import setup_logging
from saveit.models import Base

logger = logging.getLogger("saveit.scripts.init_db")


def init_db():
    """데이터베이스 테이블 생성"""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info(f"Database initialized successfully ({settings.ENVIRONMENT})")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    init_db()
