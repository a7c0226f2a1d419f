"""
타임존 유틸리티

스트릭의 "하루" 경계는 settings.STREAK_TIMEZONE (기본 UTC) 기준 자정입니다.
naive datetime 은 UTC 로 간주합니다.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytz

from saveit.config import settings


def get_streak_tz(tz_name: Optional[str] = None):
    """스트릭 계산에 사용하는 타임존을 반환합니다."""
    return pytz.timezone(tz_name or settings.STREAK_TIMEZONE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_streak_tz(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """임의의 datetime 을 스트릭 타임존으로 변환합니다."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(get_streak_tz(tz_name))


def streak_day(dt: Optional[datetime] = None, tz_name: Optional[str] = None) -> date:
    """주어진 시각이 속한 스트릭 기준 날짜"""
    if dt is None:
        dt = utc_now()
    return to_streak_tz(dt, tz_name).date()


def previous_day(day: date) -> date:
    return day - timedelta(days=1)
