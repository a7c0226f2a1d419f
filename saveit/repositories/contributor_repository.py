from typing import List, Optional

from sqlalchemy.orm import Session

from saveit.models.tracker import ContributorRole, TrackerContributor
from saveit.repositories.base import BaseRepository
from saveit.schemas.tracker import ContributorEntry


class ContributorRepository(BaseRepository[TrackerContributor, ContributorEntry]):
    """트래커 멤버십 리포지토리 - 수정은 항상 전체 교체"""

    def __init__(self, db: Session):
        super().__init__(TrackerContributor, ContributorEntry, db)

    def list_for_tracker(
        self, tracker_id: int, role: Optional[ContributorRole] = None
    ) -> List[ContributorEntry]:
        query = self.db.query(TrackerContributor).filter(
            TrackerContributor.tracker_id == tracker_id
        )
        if role is not None:
            query = query.filter(TrackerContributor.role == role.value)

        instances = query.order_by(TrackerContributor.id.asc()).all()
        return [self._to_schema(instance) for instance in instances]

    def get_role(self, tracker_id: int, user_id: str) -> Optional[ContributorRole]:
        role = (
            self.db.query(TrackerContributor.role)
            .filter(
                TrackerContributor.tracker_id == tracker_id,
                TrackerContributor.user_id == user_id,
            )
            .scalar()
        )
        return ContributorRole(role) if role else None

    def tracker_ids_for_user(self, user_id: str) -> List[int]:
        rows = (
            self.db.query(TrackerContributor.tracker_id)
            .filter(TrackerContributor.user_id == user_id)
            .all()
        )
        return [row[0] for row in rows]

    def replace_all(self, tracker_id: int, members: List[ContributorEntry]) -> int:
        """
        트래커의 멤버십을 전체 교체 (delete all -> insert all)

        commit 하지 않습니다.
        """
        self.db.query(TrackerContributor).filter(
            TrackerContributor.tracker_id == tracker_id
        ).delete()

        for member in members:
            self.db.add(
                TrackerContributor(
                    tracker_id=tracker_id,
                    user_id=member.user_id,
                    username=member.username,
                    role=ContributorRole(member.role).value,
                )
            )
        self.db.flush()
        return len(members)
