# utils/error_handler.py
# 표준화된 에러 처리 시스템을 제공합니다.

from typing import Optional, Callable, Any, Union
from functools import wraps

from slack_sdk.errors import SlackApiError

from .logger import get_logger
from .constants import ErrorMessages, NotificationReasons
from exceptions import (
    ValidationError,
    ConflictError,
    StorageError,
    NotificationConfigMissing,
)
from models.notification import ChannelKind, NotificationFailure, NotificationOperation

logger = get_logger(__name__)


def _value(item: Union[ChannelKind, NotificationOperation, str, None]) -> Optional[str]:
    return getattr(item, "value", item)


class ErrorHandler:
    """표준화된 에러 처리를 제공하는 클래스"""

    @staticmethod
    def classify_notification_error(operation: Optional[str], error: BaseException) -> str:
        """알림 작업 실패를 사유 코드로 분류합니다."""
        if isinstance(error, NotificationConfigMissing):
            return NotificationReasons.NO_CONFIG
        if operation == NotificationOperation.SEND.value:
            return NotificationReasons.SEND_ERROR
        if operation == NotificationOperation.UPDATE.value:
            return NotificationReasons.UPDATE_ERROR
        if operation == NotificationOperation.DELETE.value:
            return NotificationReasons.DELETE_ERROR
        return NotificationReasons.UNKNOWN

    @staticmethod
    def handle_notification_error(
        channel: Union[ChannelKind, str],
        operation: Union[NotificationOperation, str],
        error: BaseException,
        context: Optional[str] = None,
    ) -> NotificationFailure:
        """
        알림 채널 작업 실패를 로깅하고 표준 결과로 변환합니다. 예외를 다시 던지지 않습니다.

        Args:
            channel: 알림 채널
            operation: 작업 종류 (send, update, delete)
            error: 발생한 에러
            context: 로그에 붙일 추가 설명

        Returns:
            NotificationFailure: success=False인 실패 결과
        """
        channel_name = _value(channel)
        operation_name = _value(operation)
        reason = ErrorHandler.classify_notification_error(operation_name, error)

        detail = str(error)
        if isinstance(error, SlackApiError):
            detail = f"{error.response.get('error', detail)}"
        elif getattr(error, "original_error", None) is not None:
            detail = f"{error} ({error.original_error})"
        if context:
            detail = f"{context}: {detail}"

        if reason == NotificationReasons.NO_CONFIG:
            logger.info(f"[{str(channel_name).upper()}] {operation_name} 건너뜀 - {detail}")
        else:
            logger.error(
                f"[{str(channel_name).upper()}] {operation_name} 실패 ({reason}): {detail}",
                exc_info=(type(error), error, error.__traceback__),
            )

        return NotificationFailure(
            reason=reason,
            error=error,
            channel=channel_name,
            operation=operation_name,
        )

    @staticmethod
    def handle_slack_command_error(
        user_id: str,
        error: Exception,
        send_message_func: Callable[[str, str], Any],
        context: str = "명령 처리"
    ) -> None:
        """
        Slack 명령어 처리 중 발생한 에러를 사용자에게 알립니다.

        Args:
            user_id: 사용자 ID
            error: 발생한 에러
            send_message_func: 메시지 전송 함수
            context: 에러 발생 컨텍스트
        """
        if isinstance(error, StorageError):
            logger.error(f"저장소 오류 - 사용자: {user_id}, 컨텍스트: {context}", exc_info=True)
            message = f"{ErrorMessages.STATUS_QUERY_FAILED}: {error}"
        elif isinstance(error, (ValidationError, ConflictError)):
            logger.warning(f"사용자 입력 오류 - 사용자: {user_id}, 컨텍스트: {context}: {error}")
            message = str(error)
        else:
            logger.error(f"{context} 중 예상치 못한 오류 - 사용자: {user_id}", exc_info=True)
            message = f"{ErrorMessages.UNEXPECTED}: {error}"

        try:
            send_message_func(user_id, message)
        except Exception as slack_error:
            logger.error(f"{ErrorMessages.MESSAGE_SEND_FAILED}: {slack_error}", exc_info=True)


def handle_exceptions(
    logger_name: Optional[str] = None,
    default_message: str = "처리 중 오류가 발생했습니다"
):
    """
    함수 데코레이터: 예외를 자동으로 로깅하고 처리합니다.

    비즈니스 에러(ValidationError, ConflictError)와 StorageError는 그대로 전파하고,
    그 외의 예외는 StorageError로 감싸 다시 던집니다.

    Args:
        logger_name: 로거 이름 (None이면 함수 모듈명 사용)
        default_message: 기본 에러 메시지
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            func_logger = get_logger(logger_name or func.__module__)
            try:
                return func(*args, **kwargs)
            except (ValidationError, ConflictError) as e:
                func_logger.warning(f"{func.__name__} 에서 비즈니스 로직 에러: {e}")
                raise
            except StorageError as e:
                func_logger.error(f"{func.__name__} 에서 저장소 에러: {e}", exc_info=True)
                raise
            except Exception as e:
                func_logger.error(f"{func.__name__} 에서 예상치 못한 에러", exc_info=True)
                raise StorageError(f"{default_message}: {e}") from e
        return wrapper
    return decorator
