import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from saveit.config import Settings, settings as default_settings
from saveit.core.exceptions import (
    AuthorizationError,
    InternalServerError,
    TrackerNotFoundError,
    ValidationError,
)
from saveit.models.tracker import ContributorRole, Tracker
from saveit.repositories.contributor_repository import ContributorRepository
from saveit.repositories.profile_repository import ProfileRepository
from saveit.repositories.tracker_repository import TrackerRepository
from saveit.schemas.streak import StreakHistoryResponse, StreakStatusResponse
from saveit.schemas.tracker import (
    ContributorEntry,
    TrackerConfig,
    TrackerMutationResponse,
    TrackerResponse,
)
from saveit.services.goal_service import progress_percent
from saveit.services.streak_service import StreakService

logger = logging.getLogger(__name__)


class TrackerService:
    """트래커 생성/수정/삭제 및 멤버십 관리"""

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or default_settings
        self.tracker_repo = TrackerRepository(db)
        self.contributor_repo = ContributorRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.streaks = StreakService(db, settings=self.settings)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def get_tracker(self, tracker_id: int, user_id: str) -> TrackerResponse:
        tracker = self._get_member_tracker(tracker_id, user_id)
        return self._to_response(tracker)

    def list_user_trackers(self, user_id: str) -> List[TrackerResponse]:
        return [
            self._to_response(tracker)
            for tracker in self.tracker_repo.list_for_user(user_id)
        ]

    def get_contributors(self, tracker_id: int, user_id: str) -> List[str]:
        """owner 를 제외한 기여자 username 목록 (수정 폼 채우기용)"""
        self._get_member_tracker(tracker_id, user_id)
        return [
            entry.username
            for entry in self.contributor_repo.list_for_tracker(
                tracker_id, role=ContributorRole.CONTRIBUTOR
            )
        ]

    def get_streak_status(self, tracker_id: int, user_id: str) -> StreakStatusResponse:
        """스트릭 상태 조회 - 조회 시점 기준으로 연속 일수를 재계산하고 저장"""
        tracker = self._get_member_tracker(tracker_id, user_id)
        try:
            status = self.streaks.get_status(tracker, user_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to evaluate streak for tracker {tracker_id}: {str(e)}")
            raise InternalServerError("Failed to evaluate streak")
        return status

    def get_streak_history(self, tracker_id: int, user_id: str) -> StreakHistoryResponse:
        """스트릭 기록 조회 - ongoing / lost 기록과 최고 연속 일수"""
        tracker = self._get_member_tracker(tracker_id, user_id)
        return self.streaks.get_history(tracker)

    # ------------------------------------------------------------------
    # 변경
    # ------------------------------------------------------------------

    def create_tracker(self, owner_id: str, config: TrackerConfig) -> TrackerMutationResponse:
        """트래커 생성 - 잔액 0, 스트릭 0 으로 시작하고 owner 멤버십을 기록"""
        owner = self.profile_repo.get_by_id(owner_id)
        if owner is None:
            raise ValidationError("Could not fetch owner profile or username.")

        try:
            tracker = self.tracker_repo.create(
                commit=False,
                owner_id=owner_id,
                balance=0,
                streak_days=0,
                **self._config_fields(config),
            )
            skipped = self._replace_members(
                tracker.id, owner.id, owner.username, config.contributors
            )
            self.streaks.start_run(tracker)
            self.db.commit()
        except ValidationError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Tracker creation failed for user {owner_id}: {str(e)}")
            raise InternalServerError("Failed to create tracker")

        logger.info(f"Tracker {tracker.id} created by user {owner_id}")
        return TrackerMutationResponse(
            success=True,
            tracker_id=tracker.id,
            skipped_usernames=skipped,
            message="Tracker created successfully",
        )

    def update_tracker(
        self, tracker_id: int, user_id: str, config: TrackerConfig
    ) -> TrackerMutationResponse:
        """
        트래커 수정 (owner 만 가능)

        스트릭 전환:
        - 켜짐 -> 꺼짐: 스트릭 로그 전체 삭제, 연속 일수 0 (복구 불가), 기록은 lost 로 마감
        - 꺼짐 -> 켜짐: 연속 일수 0 부터 새 기록 시작
        - 켜짐 유지 + 최소 금액 변경: 기존 스트릭 삭제 후 새 최소 금액으로 새 기록 시작
        """
        tracker, owner_username = self._get_owned_tracker(tracker_id, user_id)

        was_enabled = bool(tracker.streak_enabled)
        new_min = config.streak.min_amount
        min_changed = (
            was_enabled
            and config.streak.enabled
            and tracker.streak_min_amount is not None
            and new_min is not None
            and tracker.streak_min_amount != new_min
        )

        start_run = False
        try:
            if was_enabled and not config.streak.enabled:
                logger.info(f"Streaks disabled for tracker {tracker_id}")
                self.streaks.reset(tracker)
            elif min_changed:
                logger.info(
                    f"Streak minimum changed for tracker {tracker_id}: "
                    f"{tracker.streak_min_amount} -> {new_min}"
                )
                self.streaks.reset(tracker)
                start_run = True
            elif not was_enabled and config.streak.enabled:
                logger.info(f"Streaks enabled for tracker {tracker_id}")
                self.tracker_repo.set_streak_state(tracker, 0, None)
                start_run = True

            for key, value in self._config_fields(config).items():
                setattr(tracker, key, value)
            self.db.add(tracker)
            self.db.flush()
            if start_run:
                self.streaks.start_run(tracker)

            skipped = self._replace_members(
                tracker.id, user_id, owner_username, config.contributors
            )
            self.db.commit()
        except ValidationError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Tracker update failed for tracker {tracker_id}: {str(e)}")
            raise InternalServerError("Failed to update tracker")

        return TrackerMutationResponse(
            success=True,
            tracker_id=tracker.id,
            skipped_usernames=skipped,
            message="Tracker updated successfully",
        )

    def delete_tracker(self, tracker_id: int, user_id: str) -> TrackerMutationResponse:
        """트래커 삭제 (owner 만 가능) - 거래, 스트릭 로그, 멤버십도 함께 삭제"""
        tracker, _ = self._get_owned_tracker(tracker_id, user_id)
        try:
            self.tracker_repo.delete(tracker)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Tracker deletion failed for tracker {tracker_id}: {str(e)}")
            raise InternalServerError("Failed to delete tracker")

        logger.info(f"Tracker {tracker_id} deleted by user {user_id}")
        return TrackerMutationResponse(
            success=True, tracker_id=tracker_id, message="Tracker deleted successfully"
        )

    # ------------------------------------------------------------------
    # 내부 헬퍼
    # ------------------------------------------------------------------

    def _replace_members(
        self,
        tracker_id: int,
        owner_id: str,
        owner_username: str,
        contributor_usernames: List[str],
    ) -> List[str]:
        """
        멤버십 전체 교체

        1. owner + 입력된 기여자 username (공백/owner 본인 제외, 중복 제거)
        2. username -> user_id 조회, 찾지 못한 username 은 경고 후 제외
        3. 기존 멤버십 삭제 후 전체 삽입

        Returns:
            List[str]: 제외된 username
        """
        usernames = [owner_username]
        for name in contributor_usernames or []:
            name = name.strip()
            if name and name != owner_username and name not in usernames:
                usernames.append(name)

        profiles = {p.username: p for p in self.profile_repo.find_by_usernames(usernames)}
        skipped = [name for name in usernames if name not in profiles]
        if skipped:
            logger.warning(
                f"Skipping unknown contributor usernames for tracker {tracker_id}: {', '.join(skipped)}"
            )

        members = []
        for name in usernames:
            profile = profiles.get(name)
            if profile is None:
                continue
            role = ContributorRole.OWNER if profile.id == owner_id else ContributorRole.CONTRIBUTOR
            members.append(ContributorEntry(user_id=profile.id, username=name, role=role))

        if not any(m.role == ContributorRole.OWNER for m in members):
            raise ValidationError("No valid contributors (including owner) found to insert.")

        self.contributor_repo.replace_all(tracker_id, members)
        return skipped

    def _config_fields(self, config: TrackerConfig) -> dict:
        return {
            "tracker_name": config.tracker_name,
            "description": config.description,
            "bank_name": config.bank_name,
            "interest_rate": config.interest_rate,
            "streak_enabled": config.streak.enabled,
            "streak_min_amount": config.streak.min_amount,
            "goal_enabled": config.goal.enabled,
            "goal_amount": config.goal.amount,
            "min_daily_amount": config.goal.min_daily_amount,
            "goal_date": config.goal.target_date,
        }

    def _get_member_tracker(self, tracker_id: int, user_id: str) -> Tracker:
        tracker = self.tracker_repo.get_model(tracker_id)
        if tracker is None:
            raise TrackerNotFoundError(tracker_id)
        if tracker.owner_id != user_id and self.contributor_repo.get_role(tracker_id, user_id) is None:
            raise AuthorizationError("You are not a member of this tracker.")
        return tracker

    def _get_owned_tracker(self, tracker_id: int, user_id: str) -> Tuple[Tracker, str]:
        tracker = self.tracker_repo.get_model(tracker_id)
        if tracker is None:
            raise TrackerNotFoundError(tracker_id)
        if tracker.owner_id != user_id:
            raise AuthorizationError("Permission Denied: Only the owner can edit this tracker.")

        owner = self.profile_repo.get_by_id(user_id)
        if owner is None:
            raise ValidationError("Could not fetch owner profile or username.")
        return tracker, owner.username

    def _to_response(self, tracker: Tracker) -> TrackerResponse:
        response = TrackerResponse.model_validate(tracker)
        if tracker.goal_enabled and tracker.goal_amount:
            response.progress_percent = progress_percent(tracker.balance, tracker.goal_amount)
        return response
