# config.py
# 프로젝트의 모든 설정 정보를 중앙에서 관리합니다.

import os
from typing import Dict, Optional
from dataclasses import dataclass


@dataclass
class NotionConfig:
    """Notion 저장소 설정"""
    api_key: str
    ships_database_id: str
    cabins_database_id: str
    reservations_database_id: str
    notifications_database_id: str

    @classmethod
    def from_env(cls) -> "NotionConfig":
        """환경변수에서 설정을 로드합니다."""
        return cls(
            api_key=os.environ["NOTION_API_KEY"],
            ships_database_id=os.environ["NOTION_SHIPS_DATABASE_ID"],
            cabins_database_id=os.environ["NOTION_CABINS_DATABASE_ID"],
            reservations_database_id=os.environ["NOTION_RESERVATIONS_DATABASE_ID"],
            notifications_database_id=os.environ["NOTION_NOTIFICATIONS_DATABASE_ID"],
        )


@dataclass
class SlackConfig:
    """Slack 앱(예약 진입점) 설정"""
    bot_token: str
    app_token: str

    @classmethod
    def from_env(cls) -> "SlackConfig":
        """환경변수에서 설정을 로드합니다."""
        return cls(
            bot_token=os.environ["SLACK_BOT_TOKEN"],
            app_token=os.environ["SLACK_APP_TOKEN"],
        )


class AppConfig:
    """애플리케이션 전체 설정"""

    # 예약 시간 표시에 사용하는 시간대
    TIMEZONE_NAME: str = "Asia/Seoul"
    TIMEZONE_OFFSET_HOURS: int = 9

    SUPPORTED_LOCALES = ("ko", "en")
    DEFAULT_LOCALE: str = "ko"

    # 외부 알림 호출 타임아웃(초)
    HTTP_TIMEOUT: float = 10.0

    # 백그라운드 알림 작업 스레드 수
    BACKGROUND_WORKERS: int = 4

    # Notion 데이터베이스 속성 매핑
    NOTION_PROPS: Dict[str, str] = {
        # ships
        "ship_name": "이름",
        "ship_public_id": "공개 ID",
        "ship_members_visible": "멤버 공개",
        # cabins
        "cabin_name": "이름",
        "cabin_ship_id": "선박 ID",
        "cabin_public_id": "공개 ID",
        # reservations
        "purpose": "목적",
        "cabin_id": "선실 ID",
        "start_time": "시작시각",
        "end_time": "종료시각",
        "status": "상태",
        "created_by": "예약자",
        "slack_message_ts": "슬랙 메시지 ts",
        "slack_channel_id": "슬랙 채널 ID",
        # ship notifications
        "notification_ship_id": "선박 ID",
        "channel": "채널",
        "webhook_url": "웹훅 URL",
        "slack_bot_token": "슬랙 봇 토큰",
        "notification_slack_channel_id": "슬랙 채널 ID",
        "enabled": "활성화",
    }

    @classmethod
    def get_site_url(cls) -> Optional[str]:
        """딥링크 생성에 쓰는 사이트 주소를 반환합니다."""
        url = os.environ.get("SITE_URL")
        return url.rstrip("/") if url else None

    @classmethod
    def get_log_level(cls) -> str:
        return os.environ.get("LOG_LEVEL", "WARNING")


def get_notion_config() -> NotionConfig:
    """Notion 설정을 반환합니다."""
    return NotionConfig.from_env()


def get_slack_config() -> SlackConfig:
    """Slack 설정을 반환합니다."""
    return SlackConfig.from_env()
