# utils/logger.py
# 통합 로깅 시스템을 제공합니다.

import logging
import sys
from typing import Any, Dict, Optional

# 외부 클라이언트 라이브러리는 요청마다 로그를 남기므로 한 단계 높여 둡니다.
NOISY_LOGGERS = ("slack_bolt", "slack_sdk", "notion_client", "urllib3", "httpx")


def setup_logging(
    level: str = "WARNING",
    format_string: Optional[str] = None,
    log_file: Optional[str] = "app.log",
) -> None:
    """
    프로젝트 전체의 로깅을 설정합니다.

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: 로그 포맷 문자열
        log_file: 로그 파일 경로 (None이면 콘솔에만 출력)
    """
    if format_string is None:
        # 알림 전송은 백그라운드 스레드에서 실행되므로 스레드 이름을 함께 남깁니다.
        format_string = "%(asctime)s - %(levelname)s - %(threadName)s - %(name)s - %(message)s"

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_level = getattr(logging, level.upper())
    logging.basicConfig(level=root_level, format=format_string, handlers=handlers)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def format_context(context: Dict[str, Any]) -> str:
    """extra 값을 ``key=value`` 목록으로 만듭니다. None 값은 생략합니다."""
    pairs = [f"{key}={value}" for key, value in context.items() if value is not None]
    return f" [{', '.join(pairs)}]" if pairs else ""


class LoggerMixin:
    """로깅 기능을 제공하는 믹스인 클래스

    kwargs는 메시지 뒤에 ``[key=value]``로 붙고, LogRecord의 extra 속성으로도
    전달됩니다. name, message, created 같은 LogRecord 예약 속성 이름은 쓰지 않습니다.
    """

    @property
    def logger(self) -> logging.Logger:
        """클래스별 로거 반환"""
        return get_logger(self.__class__.__module__ + "." + self.__class__.__name__)

    def log_info(self, message: str, **kwargs) -> None:
        self.logger.info(message + format_context(kwargs), extra=kwargs)

    def log_error(self, message: str, exc_info: bool = True, **kwargs) -> None:
        self.logger.error(message + format_context(kwargs), exc_info=exc_info, extra=kwargs)

    def log_warning(self, message: str, **kwargs) -> None:
        self.logger.warning(message + format_context(kwargs), extra=kwargs)
