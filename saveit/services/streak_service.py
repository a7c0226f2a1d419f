"""
스트릭 서비스 (Streak Evaluator)

하루 상태: Inactive (기본) -> Active (그날 누적 입금액 >= streak_min_amount)
한번 Active 가 된 날은 그날 안에서 다시 Inactive 가 되지 않습니다.

연속 일수(streak_days) 재계산 규칙 - 입금 직후와 조회 시 모두 실행:
  오늘 Active
    - 오늘 이미 계산했고 값이 있으면 유지
    - 어제 Active 면 +1 (하루 한 번)
    - 어제 Inactive 면 1
  오늘 아직 Inactive
    - 어제 Active 이고 오늘 처음 계산이면 0 으로 초기화
    - 어제 Inactive 면 0
    - 그 외 유지
  last_streak_check 는 매 계산마다 오늘로 기록됩니다.

스트릭 기록(StreakRun): 스트릭을 켤 때 ongoing 기록이 시작되고, 끄거나 최소 금액을 바꾸면
lost 로 마감됩니다. 최고 연속 일수(highest_streak_days)는 초기화 후에도 유지됩니다.

"하루" 경계는 settings.STREAK_TIMEZONE 기준 자정입니다.
스트릭은 트래커 단위로 공유되어, 멤버 중 누구의 로그라도 활성화되면 그날은 Active 입니다.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from saveit.config import Settings, settings as default_settings
from saveit.models.tracker import Tracker
from saveit.repositories.streak_repository import StreakRepository
from saveit.repositories.streak_run_repository import StreakRunRepository
from saveit.repositories.tracker_repository import TrackerRepository
from saveit.schemas.streak import (
    StreakBadge,
    StreakHistoryResponse,
    StreakStatusResponse,
)
from saveit.schemas.transaction import StreakUpdate
from saveit.utils.timezone_utils import previous_day, streak_day, utc_now

logger = logging.getLogger(__name__)

# (최소 일수, 배지 이름, 이모지) - 높은 순서
STREAK_BADGES = [
    (500, "Mythical", "✨"),
    (250, "Diamond", "💎"),
    (200, "Ruby", "🔴"),
    (150, "Gold", "🛡️"),
    (100, "Platinum", "🥇"),
    (50, "Silver", "🥈"),
    (10, "Bronze", "🥉"),
    (3, "Wood", "🪵"),
]


def get_streak_badge(days: int) -> StreakBadge:
    for min_days, name, emoji in STREAK_BADGES:
        if days >= min_days:
            return StreakBadge(name=name, emoji=emoji)
    return StreakBadge(name="casual saver", emoji="")


def format_streak_days(days: Optional[int]) -> str:
    count = int(days or 0)
    unit = "day" if count == 1 else "days"
    return f"{count} {unit}"


class StreakService:
    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or default_settings
        self.streak_repo = StreakRepository(db)
        self.run_repo = StreakRunRepository(db)
        self.tracker_repo = TrackerRepository(db)

    def today(self, now: Optional[datetime] = None) -> date:
        return streak_day(now, self.settings.STREAK_TIMEZONE)

    def record_deposit(
        self,
        tracker: Tracker,
        user_id: str,
        amount: Decimal,
        now: Optional[datetime] = None,
    ) -> StreakUpdate:
        """입금액을 오늘 로그에 누적하고 연속 일수를 재계산 (commit 하지 않음)"""
        if not tracker.streak_enabled or not tracker.streak_min_amount:
            return StreakUpdate(streak_days=tracker.streak_days or 0)

        now = now or utc_now()
        today = self.today(now)

        log, newly_activated = self.streak_repo.add_deposit(
            tracker_id=tracker.id,
            user_id=user_id,
            day=today,
            amount=amount,
            min_amount=Decimal(tracker.streak_min_amount),
            now=now,
        )
        if newly_activated:
            logger.info(
                f"Streak activated for tracker {tracker.id} on {today} by user {user_id}"
            )

        is_active_today, streak_days = self.evaluate(tracker, today)
        return StreakUpdate(
            streak_activated=newly_activated,
            is_active_today=is_active_today,
            streak_days=streak_days,
            amount_today=log.amount_deposited,
        )

    def evaluate(self, tracker: Tracker, today: date) -> Tuple[bool, int]:
        """
        연속 일수 재계산

        Returns:
            (오늘 활성 여부, 새 연속 일수)
        """
        if not tracker.streak_enabled:
            return False, 0

        today_active = self.streak_repo.is_day_active(tracker.id, today)
        yesterday = previous_day(today)
        yesterday_active = self.streak_repo.is_day_active(tracker.id, yesterday)
        current = tracker.streak_days or 0
        checked_today = tracker.last_streak_check == today

        if today_active:
            if checked_today and current >= 1:
                new_days = current
            elif yesterday_active:
                # 오늘 앞서 비활성 상태로 조회되며 0 이 된 경우 로그에서 어제까지의 연속 일수를 복원
                base = current if current > 0 else self._run_length(tracker.id, yesterday)
                new_days = base + 1
            else:
                new_days = 1
        else:
            if not yesterday_active:
                new_days = 0
            elif not checked_today:
                new_days = 0
            else:
                new_days = current

        self.tracker_repo.set_streak_state(tracker, new_days, today)
        self._record_progress(tracker, new_days)
        return today_active, new_days

    def start_run(self, tracker: Tracker) -> None:
        """현재 최소 금액으로 ongoing 스트릭 기록 시작 (commit 하지 않음)"""
        if not tracker.streak_enabled or not tracker.streak_min_amount:
            return
        run = self.run_repo.start(tracker.id, Decimal(tracker.streak_min_amount))
        logger.info(f"Streak run {run.id} started for tracker {tracker.id}")

    def reset(self, tracker: Tracker, now: Optional[datetime] = None) -> int:
        """
        스트릭 데이터 완전 삭제 - 되돌릴 수 없음

        ongoing 기록을 lost 로 마감하고, 모든 StreakLog 를 지우고
        streak_days=0, last_streak_check=None 으로 초기화합니다.
        마감된 기록과 highest_streak_days 는 남습니다. commit 하지 않습니다.
        """
        run = self.run_repo.mark_lost(tracker.id, now or utc_now())
        if run is not None:
            logger.info(
                f"Streak run {run.id} for tracker {tracker.id} lost with {run.streak_days} days"
            )
        deleted = self.streak_repo.delete_for_tracker(tracker.id)
        self.tracker_repo.set_streak_state(tracker, 0, None)
        logger.info(
            f"Streak data reset for tracker {tracker.id}: {deleted} log rows removed"
        )
        return deleted

    def get_history(self, tracker: Tracker) -> StreakHistoryResponse:
        """스트릭 기록 (최신 구간부터)과 최근 일별 로그"""
        return StreakHistoryResponse(
            tracker_id=tracker.id,
            highest_streak_days=tracker.highest_streak_days or 0,
            runs=self.run_repo.list_for_tracker(tracker.id),
            recent_days=self.streak_repo.list_for_tracker(
                tracker.id, limit=self.settings.STREAK_HISTORY_DAYS
            ),
        )

    def get_status(
        self, tracker: Tracker, user_id: str, now: Optional[datetime] = None
    ) -> StreakStatusResponse:
        """조회 시 스트릭 상태 재계산 후 반환 (commit 하지 않음)"""
        if not tracker.streak_enabled:
            return StreakStatusResponse(
                tracker_id=tracker.id,
                enabled=False,
                badge=get_streak_badge(0),
            )

        today = self.today(now)
        is_active_today, streak_days = self.evaluate(tracker, today)
        log = self.streak_repo.get_log(tracker.id, user_id, today)

        return StreakStatusResponse(
            tracker_id=tracker.id,
            enabled=True,
            is_active_today=is_active_today,
            streak_days=streak_days,
            streak_days_label=format_streak_days(streak_days),
            highest_streak_days=tracker.highest_streak_days or 0,
            amount_today=log.amount_deposited if log else Decimal("0"),
            min_amount=tracker.streak_min_amount,
            badge=get_streak_badge(streak_days),
        )

    def _record_progress(self, tracker: Tracker, streak_days: int) -> None:
        """ongoing 기록과 트래커 최고 기록 갱신"""
        if streak_days > (tracker.highest_streak_days or 0):
            tracker.highest_streak_days = streak_days

        run = self.run_repo.get_ongoing(tracker.id)
        if run is None:
            # 기록 없이 스트릭이 켜진 트래커는 첫 계산 때 기록을 시작
            if not tracker.streak_min_amount:
                return
            run = self.run_repo.start(tracker.id, Decimal(tracker.streak_min_amount))
        run.streak_days = streak_days
        if streak_days > run.highest_streak_days:
            run.highest_streak_days = streak_days
        self.db.flush()

    def _run_length(self, tracker_id: int, last_day: date) -> int:
        """last_day 에서 끝나는 연속 활성 일수"""
        count = 0
        expected = last_day
        for day in self.streak_repo.active_days(tracker_id, up_to=last_day):
            if day != expected:
                break
            count += 1
            expected = previous_day(expected)
        return count
