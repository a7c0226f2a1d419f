import logging
from typing import Iterator

from sqlalchemy.orm import Session

from saveit.database.connection import SessionLocal

logger = logging.getLogger(__name__)


def get_db() -> Iterator[Session]:
    """요청 단위 세션. 서비스가 commit 하지 않은 변경은 종료 시 rollback 됩니다."""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        if db.in_transaction():
            logger.warning(f"Rolling back session after error: {type(e).__name__}")
            db.rollback()
        raise
    finally:
        db.close()
