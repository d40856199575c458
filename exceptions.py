# exceptions.py
# 프로젝트에서 사용할 사용자 정의 예외를 정의합니다.

from typing import Optional


class ValidationError(Exception):
    """입력값 유효성 검사 실패 시 발생하는 예외"""
    pass


class ConflictError(Exception):
    """예약 시간 중복 등 저장소가 예약을 거부했을 때 사용하는 예외

    저장소가 돌려준 메시지를 그대로 사용자에게 보여줍니다.
    """

    def __init__(self, message: str, cabin_id: Optional[str] = None):
        super().__init__(message)
        self.cabin_id = cabin_id


class StorageError(Exception):
    """저장소(Notion 등) 작업 실패 시 발생하는 예외"""
    pass


class NotificationError(Exception):
    """알림 채널 작업(전송/수정/삭제) 실패를 나타내는 예외"""

    def __init__(
        self,
        message: str,
        channel: str,
        operation: str,
        original_error: Optional[BaseException] = None,
    ):
        """
        Args:
            message: 에러 메시지
            channel: 알림 채널 (slack, discord)
            operation: 작업 종류 (send, update, delete)
            original_error: 원래 발생한 예외
        """
        super().__init__(message)
        self.channel = channel
        self.operation = operation
        self.original_error = original_error


class SlackNotificationError(NotificationError):
    def __init__(self, operation: str, message: str, original_error: Optional[BaseException] = None):
        super().__init__(f"Slack API {operation} failed: {message}", "slack", operation, original_error)


class DiscordNotificationError(NotificationError):
    def __init__(self, operation: str, message: str, original_error: Optional[BaseException] = None):
        super().__init__(f"Discord API {operation} failed: {message}", "discord", operation, original_error)


class NotificationConfigMissing(NotificationError):
    """채널 설정이 없어 작업을 수행할 수 없는 경우 (장애가 아닌 예상된 상황)"""

    def __init__(self, channel: str, operation: str):
        super().__init__(f"{channel} 알림 설정이 없습니다", channel, operation)
