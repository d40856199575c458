# models/slack_types.py
# Slack 진입점에서 사용하는 요청 타입을 정의합니다.

from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field


@dataclass
class SlackBody:
    """Slack 슬래시 커맨드/액션 바디"""
    user_id: str
    channel_id: str
    channel_name: str = ""
    trigger_id: Optional[str] = None
    text: str = ""
    actions: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_command(cls, body: Dict[str, Any]) -> "SlackBody":
        return cls(
            user_id=body["user_id"],
            channel_id=body.get("channel_id", ""),
            channel_name=body.get("channel_name", ""),
            trigger_id=body.get("trigger_id"),
            text=(body.get("text") or "").strip(),
        )

    @classmethod
    def from_action(cls, body: Dict[str, Any]) -> "SlackBody":
        channel = body.get("channel") or {}
        return cls(
            user_id=body["user"]["id"],
            channel_id=channel.get("id", ""),
            channel_name=channel.get("name", ""),
            trigger_id=body.get("trigger_id"),
            actions=body.get("actions", []),
        )

    @property
    def is_direct_message(self) -> bool:
        """DM 채널인지 확인"""
        return self.channel_name == "directmessage"

    @property
    def target_channel(self) -> str:
        """메시지를 보낼 대상 채널 (DM인 경우 user_id, 아니면 channel_id)"""
        return self.user_id if self.is_direct_message else self.channel_id

    @property
    def action_value(self) -> Optional[str]:
        return self.actions[0].get("value") if self.actions else None

    @property
    def args(self) -> List[str]:
        return self.text.split()
