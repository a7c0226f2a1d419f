from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from saveit.models.profile import Profile
from saveit.repositories.base import BaseRepository
from saveit.schemas.profile import ProfileResponse


class ProfileRepository(BaseRepository[Profile, ProfileResponse]):
    def __init__(self, db: Session):
        super().__init__(Profile, ProfileResponse, db)

    def get_by_username(self, username: str) -> Optional[ProfileResponse]:
        instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.username == username)
            .first()
        )
        return self._to_schema(instance)

    def find_by_usernames(self, usernames: Iterable[str]) -> List[ProfileResponse]:
        """username 목록으로 프로필 조회 (없는 username 은 결과에서 빠짐)"""
        names = list(usernames)
        if not names:
            return []

        instances = (
            self.db.query(self.model_class)
            .filter(self.model_class.username.in_(names))
            .all()
        )
        return [self._to_schema(instance) for instance in instances]
