"""
입출금 거래 원장

한번 생성된 레코드는 수정되지 않습니다 (append-only).
new_balance 는 거래 직후의 트래커 잔액입니다.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from saveit.models.base import Base, CreatedAtMixin


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class Transaction(Base, CreatedAtMixin):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        Index("idx_transactions_tracker_created", "tracker_id", "created_at"),
        Index("idx_transactions_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tracker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("trackers.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, tracker_id={self.tracker_id}, "
            f"type={self.type}, amount={self.amount})>"
        )
