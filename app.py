# app.py
# Slack Bolt 앱을 소켓 모드로 초기화하고, 선실 예약 요청을 처리하는 메인 파일입니다.

from slack_bolt.adapter.socket_mode import SocketModeHandler
from slack_bolt import App
from dotenv import load_dotenv

# .env 파일에서 환경 변수 로드
load_dotenv()

# 설정 및 유틸리티 임포트
from config import AppConfig, get_notion_config, get_slack_config
from utils.logger import setup_logging, get_logger
from utils.error_handler import ErrorHandler
from utils.background import BackgroundTaskRunner
from utils.date_utils import parse_command_datetime
from utils.constants import SlackCommands, ErrorMessages, SuccessMessages, ActionIds

# 서비스, 뷰, 모델 임포트
from models.slack_types import SlackBody
from services import BookingService, NotionReservationStore
from views.notification_view import build_confirmation_blocks, build_status_blocks

# 로깅 설정
setup_logging(AppConfig.get_log_level())
logger = get_logger(__name__)

# 설정 로드
slack_config = get_slack_config()

# Bolt 앱 및 서비스 초기화
app = App(token=slack_config.bot_token)
store = NotionReservationStore(get_notion_config())
runner = BackgroundTaskRunner()
booking_service = BookingService(store, runner)


def _send_ephemeral(client, body: SlackBody, text: str, blocks=None) -> None:
    client.chat_postEphemeral(channel=body.target_channel, user=body.user_id, text=text, blocks=blocks)


def _room_name(cabin_id: str) -> str:
    cabin = store.get_cabin(cabin_id)
    return cabin.name if cabin and cabin.name else cabin_id


# --- Slack Command Handlers ---
@app.command(SlackCommands.RESERVATION)
def handle_reservation_command(ack, body, client):
    """선실 예약 명령어를 처리합니다: <선실ID> YYYY-MM-DD HH:MM HH:MM <목적>"""
    ack()
    request = SlackBody.from_command(body)

    args = request.args
    if len(args) < 5:
        _send_ephemeral(client, request, ErrorMessages.INVALID_COMMAND_FORMAT)
        return

    cabin_id, date_str, start_str, end_str = args[:4]
    purpose = " ".join(args[4:])
    try:
        start = parse_command_datetime(date_str, start_str)
        end = parse_command_datetime(date_str, end_str)
    except ValueError:
        _send_ephemeral(client, request, ErrorMessages.INVALID_COMMAND_FORMAT)
        return

    try:
        response = booking_service.book(
            cabin_id, start, end, purpose,
            locale=AppConfig.DEFAULT_LOCALE,
            created_by=request.user_id,
        )
        if not response.ok:
            _send_ephemeral(client, request, f"❌ {response.message}")
            return

        _send_ephemeral(
            client,
            request,
            SuccessMessages.RESERVATION_COMPLETED,
            blocks=build_confirmation_blocks(_room_name(cabin_id), response.reservation),
        )
        logger.info(f"예약 생성 완료 - 사용자: {request.user_id}, 선실: {cabin_id}")

    except Exception as e:
        logger.error(f"예약 처리 실패 - 사용자: {request.user_id}: {e}")
        ErrorHandler.handle_slack_command_error(
            user_id=request.user_id,
            error=e,
            send_message_func=lambda user_id, text: client.chat_postMessage(channel=user_id, text=text),
            context="선실 예약"
        )


@app.command(SlackCommands.STATUS)
def handle_status_command(ack, body, client):
    """선실 현황 조회 명령어를 처리합니다: <선실ID>"""
    ack()
    request = SlackBody.from_command(body)

    if len(request.args) != 1:
        _send_ephemeral(client, request, ErrorMessages.INVALID_STATUS_FORMAT)
        return

    cabin_id = request.args[0]
    try:
        result = booking_service.get_cabin_status(cabin_id)
        room_name = _room_name(cabin_id)
        client.chat_postMessage(
            channel=request.target_channel,
            text=room_name,
            blocks=build_status_blocks(room_name, result),
        )
    except Exception as e:
        logger.error(f"선실 현황 조회 실패 - 사용자: {request.user_id}: {e}")
        ErrorHandler.handle_slack_command_error(
            user_id=request.user_id,
            error=e,
            send_message_func=lambda user_id, text: client.chat_postMessage(channel=user_id, text=text),
            context="선실 현황 조회"
        )


# --- Slack Action Handlers ---
@app.action(ActionIds.CANCEL_RESERVATION)
def handle_cancel_reservation_button(ack, body, client):
    """'예약 취소하기' 버튼 클릭을 처리합니다."""
    ack()
    request = SlackBody.from_action(body)
    reservation_id = request.action_value

    logger.info(f"예약 취소 요청 - 사용자: {request.user_id}, 예약: {reservation_id}")
    try:
        response = booking_service.cancel(reservation_id)
        text = SuccessMessages.RESERVATION_CANCELLED if response.ok else f"❌ {response.message}"
        client.chat_postMessage(channel=request.user_id, text=text)
    except Exception as e:
        logger.error(f"예약 취소 실패: {e}", exc_info=True)
        client.chat_postMessage(channel=request.user_id, text=ErrorMessages.RESERVATION_CANCEL_FAILED)


# --- Main Execution ---
if __name__ == "__main__":
    logger.info("🚀 선실 예약 시스템 시작")

    try:
        handler = SocketModeHandler(app, slack_config.app_token)
        handler.start()
    except KeyboardInterrupt:
        logger.info("👋 시스템 종료 요청")
    except Exception as e:
        logger.error(f"❌ 시스템 시작 실패: {e}", exc_info=True)
    finally:
        runner.shutdown(wait_for_tasks=True)
        logger.info("🔚 선실 예약 시스템 종료")
