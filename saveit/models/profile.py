from typing import Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from saveit.models.base import BaseModel


class Profile(BaseModel):
    """
    사용자 프로필

    id는 외부 인증 제공자가 발급한 사용자 ID를 그대로 사용합니다.
    기여자 초대 시 username -> user_id 변환에 사용됩니다.
    """

    __tablename__ = "profiles"
    __table_args__ = (Index("idx_profiles_username", "username"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self):
        return f"<Profile(id={self.id}, username={self.username})>"
