from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional, Union

TITLE_MAX_LENGTH = 50


def _parse(value: Union[datetime, str]) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def get_date_group(date: Union[datetime, str], now: Optional[datetime] = None) -> str:
    """Sidebar bucket for a chat last touched at ``date``."""
    current = _parse(now) if now is not None else datetime.now(timezone.utc)
    diff_days = (current - _parse(date)).days

    if diff_days <= 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days <= 7:
        return "Previous 7 Days"
    if diff_days <= 30:
        return "Previous 30 Days"
    return "Older"


def generate_chat_title(first_message: str) -> str:
    trimmed = first_message.strip()
    if len(trimmed) <= TITLE_MAX_LENGTH:
        return trimmed
    return trimmed[:TITLE_MAX_LENGTH].strip() + "..."
