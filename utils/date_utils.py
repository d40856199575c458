# utils/date_utils.py
# 날짜 관련 유틸리티 함수들을 제공합니다.

from datetime import datetime, timedelta, timezone
from typing import Optional

from config import AppConfig
from .constants import DateFormats

# 한국 시간대 설정 (UTC+9)
KST = timezone(timedelta(hours=AppConfig.TIMEZONE_OFFSET_HOURS), name=AppConfig.TIMEZONE_NAME)


def now() -> datetime:
    """설정된 시간대 기준 현재 시각을 반환합니다."""
    return datetime.now(KST)


def ensure_aware(value: datetime, tz: timezone = KST) -> datetime:
    """타임존 정보가 없으면 기본 시간대를 붙입니다."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def parse_iso(value: str) -> datetime:
    """ISO-8601 문자열을 타임존이 있는 datetime으로 변환합니다."""
    return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))


def format_short_date(value: datetime, fmt: str = DateFormats.SHORT_DATE, tz: timezone = KST) -> str:
    """YY-MM-DD 형식(또는 주어진 형식)의 날짜 문자열"""
    return ensure_aware(value).astimezone(tz).strftime(fmt)


def format_date(value: datetime, tz: timezone = KST) -> str:
    """YYYY-MM-DD 형식의 날짜 문자열"""
    return ensure_aware(value).astimezone(tz).strftime(DateFormats.ISO_DATE)


def format_time(value: datetime, tz: timezone = KST) -> str:
    """HH:MM 24시간 형식의 시각 문자열"""
    return ensure_aware(value).astimezone(tz).strftime(DateFormats.TIME_24H)


def parse_command_datetime(date_str: str, time_str: str) -> datetime:
    """
    커맨드 인자(YYYY-MM-DD, HH:MM)를 기본 시간대의 datetime으로 변환합니다.

    Raises:
        ValueError: 형식이 올바르지 않은 경우
    """
    parsed = datetime.strptime(f"{date_str} {time_str}", DateFormats.DATETIME_ISO)
    return parsed.replace(tzinfo=KST)
