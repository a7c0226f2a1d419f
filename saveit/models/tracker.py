"""
트래커 데이터 모델

트래커는 사용자가 만든 저축 계좌/목표입니다.
잔액(balance)은 항상 0 이상이어야 하며, 모든 입출금은 transactions 테이블에 기록됩니다.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.schema import UniqueConstraint

from saveit.models.base import BaseModel


class ContributorRole(str, Enum):
    OWNER = "owner"
    CONTRIBUTOR = "contributor"


class Tracker(BaseModel):
    __tablename__ = "trackers"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_trackers_balance_non_negative"),
        CheckConstraint("streak_days >= 0", name="ck_trackers_streak_days_non_negative"),
        Index("idx_trackers_owner_id", "owner_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False
    )
    tracker_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    interest_rate: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(6, 3), nullable=True
    )

    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )

    # 목표 설정 - min_daily_amount 와 goal_date 중 하나만 설정됨
    goal_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    goal_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    min_daily_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    goal_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # 스트릭 설정
    streak_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    streak_min_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    streak_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_streak_check: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    # 스트릭 초기화 후에도 유지되는 최고 기록
    highest_streak_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    contributors: Mapped[List["TrackerContributor"]] = relationship(
        back_populates="tracker", cascade="all, delete-orphan"
    )
    transactions = relationship(
        "Transaction", cascade="all, delete-orphan"
    )
    streak_logs = relationship(
        "StreakLog", cascade="all, delete-orphan"
    )
    streak_runs = relationship(
        "StreakRun", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Tracker(id={self.id}, name={self.tracker_name}, balance={self.balance})>"


class TrackerContributor(BaseModel):
    """
    트래커 멤버십

    트래커당 owner 행은 정확히 하나입니다.
    수정 시에는 전체 삭제 후 재삽입합니다.
    """

    __tablename__ = "tracker_contributors"
    __table_args__ = (
        UniqueConstraint("tracker_id", "user_id", name="uq_tracker_contributor"),
        Index("idx_tracker_contributors_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tracker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("trackers.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False
    )
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), default=ContributorRole.CONTRIBUTOR.value, nullable=False
    )

    tracker: Mapped["Tracker"] = relationship(back_populates="contributors")
