import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from saveit.models.base import BaseModel


class StreakLog(BaseModel):
    """
    일별 스트릭 로그 - (tracker, user, date) 당 최대 한 행

    같은 날 입금이 누적되면 amount_deposited 가 증가하고,
    최소 금액에 도달하면 is_active 가 True 로 바뀝니다 (하루 안에서는 되돌아가지 않음).
    """

    __tablename__ = "streak_logs"
    __table_args__ = (
        UniqueConstraint("tracker_id", "user_id", "date", name="uq_streak_log_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tracker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("trackers.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    amount_deposited: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    activated_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class StreakRunStatus(str, Enum):
    ONGOING = "ongoing"
    LOST = "lost"


class StreakRun(BaseModel):
    """
    스트릭 기록 - 트래커 스트릭 한 구간

    스트릭을 켤 때 ongoing 으로 시작하고, 끄거나 최소 금액을 바꾸면 lost 로 마감됩니다.
    트래커당 ongoing 행은 최대 하나이며, lost 행은 로그가 삭제된 뒤에도 남습니다.
    """

    __tablename__ = "streak_runs"
    __table_args__ = (
        Index("idx_streak_runs_tracker_id_status", "tracker_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tracker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("trackers.id", ondelete="CASCADE"), nullable=False
    )
    min_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=StreakRunStatus.ONGOING.value, nullable=False
    )
    streak_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    highest_streak_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ended_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
