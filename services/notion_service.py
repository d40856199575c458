# services/notion_service.py
# Notion 데이터베이스를 예약 저장소로 사용하는 구현입니다.

import threading
from collections import defaultdict
from datetime import datetime
from typing import List, Dict, Any, Optional

from notion_client import APIErrorCode, APIResponseError, Client
from notion_client.helpers import collect_paginated_api

from config import NotionConfig, AppConfig
from models.notification import ChannelKind, NotificationSetting, OutboundMessageRecord
from models.reservation import Cabin, Reservation, ReservationStatus, Ship, StorageResult
from utils.logger import LoggerMixin, get_logger
from utils.error_handler import handle_exceptions
from utils.date_utils import ensure_aware, parse_iso
from exceptions import StorageError

from .storage import ReservationStore
from .memory_store import OVERLAP_MESSAGE, UNKNOWN_CABIN_MESSAGE

logger = get_logger(__name__)


def _plain_text(prop: Optional[Dict[str, Any]]) -> str:
    """title/rich_text 속성의 평문을 꺼냅니다."""
    if not prop:
        return ""
    parts = prop.get("title") or prop.get("rich_text") or []
    return "".join(part.get("plain_text") or part.get("text", {}).get("content", "") for part in parts)


def _date_start(prop: Optional[Dict[str, Any]]) -> Optional[datetime]:
    if not prop or not prop.get("date") or not prop["date"].get("start"):
        return None
    return parse_iso(prop["date"]["start"])


def _rich_text(value: Optional[str]) -> Dict[str, Any]:
    return {"rich_text": [{"text": {"content": value}}] if value else []}


class NotionReservationStore(ReservationStore, LoggerMixin):
    """
    Notion 저장소

    Notion API에는 조건부 쓰기가 없으므로, 겹침 조회와 페이지 생성을 선실별
    프로세스 내부 락으로 직렬화합니다. 원자성은 단일 프로세스 안에서만 보장됩니다.
    """

    def __init__(self, config: NotionConfig, client: Optional[Client] = None):
        """
        Args:
            config: Notion 설정
            client: 주입할 Notion 클라이언트 (없으면 config.api_key로 생성)
        """
        self.config = config
        self.client = client or Client(auth=config.api_key)
        self.props = AppConfig.NOTION_PROPS
        self._cabin_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, cabin_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._cabin_locks[cabin_id]

    # --- 예약 생성 ---

    @handle_exceptions(default_message="예약 생성에 실패했습니다")
    def create_confirmed_reservation(
        self,
        cabin_id: str,
        start: datetime,
        end: datetime,
        purpose: str,
        created_by: Optional[str] = None,
    ) -> StorageResult:
        start, end = ensure_aware(start), ensure_aware(end)

        cabin = self.get_cabin(cabin_id)
        if cabin is None:
            return StorageResult(error=UNKNOWN_CABIN_MESSAGE)
        # Notion은 하이픈 유무가 다른 ID를 같은 페이지로 조회하므로 락/필터/저장에는 페이지 ID를 씁니다.
        cabin_id = cabin.id

        with self._lock_for(cabin_id):
            conflicts = self._query_conflicts(cabin_id, start, end)
            if conflicts:
                self.log_info(f"충돌 검사 완료: {len(conflicts)}개 찾음", cabin_id=cabin_id,
                              time_range=f"{start} ~ {end}")
                return StorageResult(error=OVERLAP_MESSAGE)

            try:
                response = self.client.pages.create(
                    parent={"database_id": self.config.reservations_database_id},
                    properties=self._build_reservation_properties(cabin_id, start, end, purpose, created_by),
                )
            except Exception as e:
                self.log_error("Notion 페이지 생성 중 오류", cabin_id=cabin_id)
                raise StorageError(f"Notion 페이지 생성에 실패했습니다: {e}")

        if not response or "id" not in response:
            raise StorageError("Notion에서 유효하지 않은 응답을 받았습니다.")

        self.log_info("예약 생성 성공", cabin_id=cabin_id, page_id=response["id"])
        return StorageResult(reservation=self._parse_reservation(response))

    def _query_conflicts(self, cabin_id: str, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        try:
            return self._query_all(
                self.config.reservations_database_id,
                filter=self._build_conflict_filter(cabin_id, start, end),
            )
        except Exception as e:
            self.log_error("Notion DB 조회 중 오류", cabin_id=cabin_id)
            raise StorageError(f"Notion DB 조회에 실패했습니다: {e}")

    def _build_conflict_filter(self, cabin_id: str, start: datetime, end: datetime) -> Dict[str, Any]:
        """
        충돌 검사를 위한 필터 조건 생성

        기존.시작 < 새.종료 그리고 기존.종료 > 새.시작 (확정 예약만).
        기존 예약의 종료 시각과 새 예약의 시작 시각이 같은 경우는 충돌로 보지 않습니다.
        """
        return {
            "and": [
                {"property": self.props["cabin_id"], "rich_text": {"equals": cabin_id}},
                {"property": self.props["status"], "select": {"equals": ReservationStatus.CONFIRMED.value}},
                {"property": self.props["start_time"], "date": {"before": end.isoformat()}},
                {"property": self.props["end_time"], "date": {"after": start.isoformat()}},
            ]
        }

    def _build_reservation_properties(
        self, cabin_id: str, start: datetime, end: datetime, purpose: str, created_by: Optional[str]
    ) -> Dict[str, Any]:
        """예약 데이터를 Notion 속성 형태로 변환"""
        return {
            self.props["purpose"]: {"title": [{"text": {"content": purpose}}]},
            self.props["cabin_id"]: _rich_text(cabin_id),
            self.props["start_time"]: {"date": {"start": start.isoformat()}},
            self.props["end_time"]: {"date": {"start": end.isoformat()}},
            self.props["status"]: {"select": {"name": ReservationStatus.CONFIRMED.value}},
            self.props["created_by"]: _rich_text(created_by),
        }

    # --- 조회 ---

    @handle_exceptions(default_message="선실 조회에 실패했습니다")
    def get_cabin(self, cabin_id: str) -> Optional[Cabin]:
        page = self._retrieve(cabin_id)
        if page is None:
            return None
        props = page.get("properties", {})
        return Cabin(
            id=page["id"],
            ship_id=_plain_text(props.get(self.props["cabin_ship_id"])),
            name=_plain_text(props.get(self.props["cabin_name"])),
            public_id=_plain_text(props.get(self.props["cabin_public_id"])) or None,
        )

    @handle_exceptions(default_message="선박 조회에 실패했습니다")
    def get_ship(self, ship_id: str) -> Optional[Ship]:
        page = self._retrieve(ship_id)
        if page is None:
            return None
        props = page.get("properties", {})
        visible = props.get(self.props["ship_members_visible"], {}).get("checkbox", True)
        return Ship(
            id=page["id"],
            public_id=_plain_text(props.get(self.props["ship_public_id"])),
            name=_plain_text(props.get(self.props["ship_name"])),
            members_visible=bool(visible),
        )

    @handle_exceptions(default_message="알림 설정 조회에 실패했습니다")
    def get_notification_settings(self, ship_id: str) -> List[NotificationSetting]:
        pages = self._query_all(
            self.config.notifications_database_id,
            filter={"property": self.props["notification_ship_id"], "rich_text": {"equals": ship_id}},
        )
        settings = []
        for page in pages:
            props = page.get("properties", {})
            settings.append(NotificationSetting(
                channel=_plain_text(props.get(self.props["channel"])).strip().lower(),
                enabled=bool(props.get(self.props["enabled"], {}).get("checkbox", False)),
                webhook_url=props.get(self.props["webhook_url"], {}).get("url") or None,
                slack_bot_token=_plain_text(props.get(self.props["slack_bot_token"])) or None,
                slack_channel_id=_plain_text(props.get(self.props["notification_slack_channel_id"])) or None,
            ))
        self.log_info(f"알림 설정 조회 완료: {len(settings)}개", ship_id=ship_id)
        return settings

    @handle_exceptions(default_message="예약 목록 조회에 실패했습니다")
    def list_reservations(self, cabin_id: str) -> List[Reservation]:
        """선실의 예약을 모두 조회합니다. 한 번에 100개까지만 오므로 다음 페이지를 끝까지 따라갑니다."""
        cabin = self.get_cabin(cabin_id)
        if cabin is None:
            return []

        pages = self._query_all(
            self.config.reservations_database_id,
            filter={"property": self.props["cabin_id"], "rich_text": {"equals": cabin.id}},
            sorts=[{"property": self.props["start_time"], "direction": "ascending"}],
        )
        reservations = []
        for page in pages:
            try:
                reservations.append(self._parse_reservation(page))
            except (KeyError, ValueError) as e:
                self.log_warning(f"예약 파싱 실패, 건너뜀: {e}", page_id=page.get("id"))
        return reservations

    @handle_exceptions(default_message="예약 정보 조회에 실패했습니다")
    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        page = self._retrieve(reservation_id)
        return self._parse_reservation(page) if page else None

    @handle_exceptions(default_message="예약 상태 변경에 실패했습니다")
    def update_reservation_status(self, reservation_id: str, status: ReservationStatus) -> Optional[Reservation]:
        if self._retrieve(reservation_id) is None:
            return None
        response = self.client.pages.update(
            page_id=reservation_id,
            properties={self.props["status"]: {"select": {"name": status.value}}},
        )
        self.log_info("예약 상태 변경 성공", reservation_id=reservation_id, status=status.value)
        return self._parse_reservation(response)

    # --- 전송 메시지 기록 (Slack만 reservation 페이지에 저장) ---

    @handle_exceptions(default_message="메시지 기록 저장에 실패했습니다")
    def save_outbound_message(self, record: OutboundMessageRecord) -> None:
        if record.channel is not ChannelKind.SLACK:
            self.log_warning("Slack 이외 채널의 메시지 기록은 저장하지 않습니다",
                             channel=record.channel.value)
            return
        self.client.pages.update(
            page_id=record.reservation_id,
            properties={
                self.props["slack_message_ts"]: _rich_text(record.message_id),
                self.props["slack_channel_id"]: _rich_text(record.channel_id),
            },
        )

    @handle_exceptions(default_message="메시지 기록 조회에 실패했습니다")
    def get_outbound_messages(self, reservation_id: str) -> List[OutboundMessageRecord]:
        page = self._retrieve(reservation_id)
        if page is None:
            return []
        props = page.get("properties", {})
        ts = _plain_text(props.get(self.props["slack_message_ts"]))
        if not ts:
            return []
        return [OutboundMessageRecord(
            reservation_id=reservation_id,
            channel=ChannelKind.SLACK,
            message_id=ts,
            channel_id=_plain_text(props.get(self.props["slack_channel_id"])) or None,
        )]

    @handle_exceptions(default_message="메시지 기록 삭제에 실패했습니다")
    def delete_outbound_message(self, reservation_id: str, channel: ChannelKind) -> None:
        if channel is not ChannelKind.SLACK:
            return
        self.client.pages.update(
            page_id=reservation_id,
            properties={
                self.props["slack_message_ts"]: _rich_text(None),
                self.props["slack_channel_id"]: _rich_text(None),
            },
        )

    # --- 내부 ---

    def _query_all(self, database_id: str, **kwargs) -> List[Dict[str, Any]]:
        return collect_paginated_api(self.client.databases.query, database_id=database_id, **kwargs)

    def _retrieve(self, page_id: str) -> Optional[Dict[str, Any]]:
        """페이지를 조회합니다. 없거나 보관된 페이지면 None."""
        try:
            page = self.client.pages.retrieve(page_id=page_id)
        except APIResponseError as e:
            if e.code in (APIErrorCode.ObjectNotFound, APIErrorCode.ValidationError):
                return None
            raise StorageError(f"Notion 페이지 조회에 실패했습니다: {e}")
        if page.get("archived") or page.get("in_trash"):
            return None
        return page

    def _parse_reservation(self, page: Dict[str, Any]) -> Reservation:
        props = page.get("properties", {})
        start = _date_start(props.get(self.props["start_time"]))
        end = _date_start(props.get(self.props["end_time"]))
        if start is None or end is None:
            raise ValueError("예약 시간 정보가 없습니다")
        status_name = (props.get(self.props["status"], {}).get("select") or {}).get("name")
        created_time = page.get("created_time")
        return Reservation(
            id=page["id"],
            cabin_id=_plain_text(props.get(self.props["cabin_id"])),
            start_time=start,
            end_time=end,
            purpose=_plain_text(props.get(self.props["purpose"])),
            status=ReservationStatus(status_name or ReservationStatus.CONFIRMED.value),
            created_by=_plain_text(props.get(self.props["created_by"])) or None,
            created_at=parse_iso(created_time) if created_time else None,
        )
