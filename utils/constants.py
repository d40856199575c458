# utils/constants.py
# 프로젝트 전체에서 사용하는 상수들을 정의합니다.


class SlackCommands:
    """Slack 슬래시 커맨드 상수"""
    RESERVATION = "/선실예약"
    STATUS = "/선실현황"


class DateFormats:
    """날짜 형식 상수"""
    ISO_DATE = "%Y-%m-%d"
    SHORT_DATE = "%y-%m-%d"
    TIME_24H = "%H:%M"
    DATETIME_ISO = "%Y-%m-%d %H:%M"


class ActionIds:
    """액션 ID 상수"""
    CANCEL_RESERVATION = "cancel_reservation"


class ErrorMessages:
    """에러 메시지 상수"""
    INVALID_TIME_RANGE = "종료 시간은 시작 시간보다 나중이어야 합니다."
    EMPTY_PURPOSE = "예약 목적을 입력해주세요."
    UNKNOWN_RESERVATION = "예약을 찾을 수 없습니다."
    INVALID_COMMAND_FORMAT = (
        "❌ 입력 형식이 올바르지 않습니다.\n"
        "사용법: `/선실예약 <선실ID> YYYY-MM-DD HH:MM HH:MM <목적>`\n"
        "예시: `/선실예약 cabin-1 2025-01-15 10:00 11:00 주간 회의`"
    )
    INVALID_STATUS_FORMAT = "❌ 사용법: `/선실현황 <선실ID>`"
    RESERVATION_CREATE_FAILED = "예약 처리 중 오류가 발생했습니다"
    RESERVATION_CANCEL_FAILED = "😥 예약 취소 중 오류가 발생했습니다"
    STATUS_QUERY_FAILED = "😥 선실 현황을 조회하는 중 오류가 발생했습니다"
    UNEXPECTED = "😥 요청 처리 중 예상치 못한 오류가 발생했습니다"
    MESSAGE_SEND_FAILED = "오류 메시지 전송 실패"


class SuccessMessages:
    """성공 메시지 상수"""
    RESERVATION_COMPLETED = "✅ 선실 예약 완료"
    RESERVATION_CANCELLED = "✅ 예약이 정상적으로 취소되었습니다."


class NotificationReasons:
    """알림 실패 분류"""
    NO_CONFIG = "no_config"
    SEND_ERROR = "send_error"
    UPDATE_ERROR = "update_error"
    DELETE_ERROR = "delete_error"
    UNKNOWN = "unknown"
    NO_SLACK_CONFIG = "no_slack_config"
    ERROR = "error"


class NotificationTemplates:
    """로케일별 알림 문구"""
    LINK_LABEL = {
        "ko": "상태 보기",
        "en": "View status",
    }
    DEFAULT_ROOM_NAME = "Room"
    # Slack 본문 날짜 (ko-KR 표기는 연/월/일 단위를 붙입니다)
    SLACK_DATE_FORMAT = {
        "ko": "%y년-%m월-%d일",
        "en": DateFormats.SHORT_DATE,
    }


class CabinStatusLabels:
    """선실 상태 표시 문구"""
    AVAILABLE = "🟢 사용 가능"
    IN_USE = "🔴 사용 중"
    NO_NEXT = "예정된 예약 없음"
