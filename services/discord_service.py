# services/discord_service.py
# Discord 웹훅으로 예약 알림을 전송합니다.

from typing import Optional

import requests

from config import AppConfig
from exceptions import DiscordNotificationError
from models.notification import NotificationOperation


def post_to_discord(webhook_url: str, content: str, session: Optional[requests.Session] = None,
                    timeout: Optional[float] = None) -> None:
    """
    Discord 웹훅으로 메시지를 전송합니다. 웹훅 채널은 메시지 삭제를 지원하지 않습니다.

    Raises:
        DiscordNotificationError: 연결 실패 또는 2xx가 아닌 응답
    """
    http = session or requests
    try:
        response = http.post(
            webhook_url,
            json={"content": content},
            timeout=timeout or AppConfig.HTTP_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        raise DiscordNotificationError(NotificationOperation.SEND.value, str(e), e)

    if not response.ok:
        raise DiscordNotificationError(
            NotificationOperation.SEND.value,
            f"Discord error {response.status_code}",
        )
