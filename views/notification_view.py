# views/notification_view.py
# 예약 알림 메시지 본문과 Slack 응답 블록을 생성합니다.

from typing import Any, Dict, List, Optional

from config import AppConfig
from models.notification import ReservationMessageContext
from models.reservation import CabinStatus, CabinStatusResult, Reservation
from utils.constants import ActionIds, CabinStatusLabels, NotificationTemplates
from utils.date_utils import format_date, format_short_date, format_time


def resolve_locale(locale: Optional[str]) -> str:
    return locale if locale in AppConfig.SUPPORTED_LOCALES else AppConfig.DEFAULT_LOCALE


def default_link_label(locale: Optional[str]) -> str:
    return NotificationTemplates.LINK_LABEL[resolve_locale(locale)]


def build_cabins_url(ship_public_id: Optional[str], locale: Optional[str],
                     site_url: Optional[str] = None) -> Optional[str]:
    """선박의 선실 현황 페이지 주소를 만듭니다. 사이트 주소가 없으면 None."""
    base_url = site_url if site_url is not None else AppConfig.get_site_url()
    if not base_url or not ship_public_id:
        return None
    return f"{base_url.rstrip('/')}/{resolve_locale(locale)}/ship/{ship_public_id}/cabins"


def build_slack_text(context: ReservationMessageContext, site_url: Optional[str] = None) -> str:
    """
    Slack용 예약 알림 문구를 만듭니다.

    형식: ``[선실 / 날짜 / HH:MM~HH:MM]`` 다음 줄에 ``>목적``,
    링크가 있으면 ``<url|라벨>``을 덧붙입니다. 날짜는 로케일별 형식을 따릅니다
    (ko: ``25년-01월-15일``, en: ``25-01-15``).
    """
    date_format = NotificationTemplates.SLACK_DATE_FORMAT[resolve_locale(context.locale)]
    text = (
        f"[{context.room_name} / {format_short_date(context.start_time, date_format)} / "
        f"{format_time(context.start_time)}~{format_time(context.end_time)}]\n"
        f">{context.purpose}"
    )
    if context.link_label:
        url = build_cabins_url(context.ship_public_id, context.locale, site_url)
        if url:
            text = f"{text}\n<{url}|{context.link_label}>"
    return text


def build_discord_text(context: ReservationMessageContext, site_url: Optional[str] = None) -> str:
    """Discord용 예약 알림 문구를 만듭니다 (마크다운)."""
    content = (
        f"**{context.room_name}**\n"
        f"📅 {format_date(context.start_time)} "
        f"{format_time(context.start_time)}~{format_time(context.end_time)}\n"
        f"📝 {context.purpose}"
    )
    if context.link_label:
        url = build_cabins_url(context.ship_public_id, context.locale, site_url)
        if url:
            content = f"{content}\n🔗 [{context.link_label}]({url})"
    return content


def _reservation_line(reservation: Reservation) -> str:
    return (
        f"{format_date(reservation.start_time)} "
        f"`{format_time(reservation.start_time)}~{format_time(reservation.end_time)}` "
        f"{reservation.purpose}"
    )


def build_status_blocks(room_name: str, result: CabinStatusResult) -> List[Dict[str, Any]]:
    """선실 현황 응답 블록을 생성합니다."""
    label = CabinStatusLabels.IN_USE if result.status is CabinStatus.IN_USE else CabinStatusLabels.AVAILABLE
    blocks: List[Dict[str, Any]] = [
        {"type": "header", "text": {"type": "plain_text", "text": room_name, "emoji": True}},
        {"type": "section", "text": {"type": "mrkdwn", "text": f"*{label}*"}},
    ]
    if result.active:
        blocks.append({
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"⏳ 현재: {_reservation_line(result.active)}"},
        })
    next_text = _reservation_line(result.next) if result.next else CabinStatusLabels.NO_NEXT
    blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": f"⏭️ 다음: {next_text}"}})
    return blocks


def build_confirmation_blocks(room_name: str, reservation: Reservation) -> List[Dict[str, Any]]:
    """예약 완료 후 예약자에게 보여줄 블록 (취소 버튼 포함)"""
    return [
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": "🎉 *선실 예약이 성공적으로 완료되었습니다!*"},
        },
        {"type": "divider"},
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"🗓️ *{room_name}* {_reservation_line(reservation)}"},
        },
        {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "❌ 예약 취소하기"},
                    "style": "danger",
                    "action_id": ActionIds.CANCEL_RESERVATION,
                    "value": reservation.id,
                }
            ],
        },
    ]
