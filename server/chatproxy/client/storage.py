from __future__ import annotations
import json
import logging
import threading
from pathlib import Path
from typing import List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from chatproxy.schemas.chat import AppSettings, ChatSummary

logger = logging.getLogger(__name__)

SETTINGS_FILE = "ai-chat-settings.json"
CHATS_FILE = "ai-chat-history.json"

_chats_adapter = TypeAdapter(List[ChatSummary])


class LocalStore:
    """JSON-file persistence for client settings and chat history.

    Unreadable or missing files read as empty; write failures are logged.
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self._lock = threading.Lock()

    @property
    def settings_path(self) -> Path:
        return self.directory / SETTINGS_FILE

    @property
    def chats_path(self) -> Path:
        return self.directory / CHATS_FILE

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, path: Path, data: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_text(data, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            logger.error("Failed to save %s: %s", path.name, e)

    # Settings
    def get_settings(self) -> Optional[AppSettings]:
        with self._lock:
            raw = self._read(self.settings_path)
        if not raw:
            return None
        try:
            return AppSettings.model_validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring unreadable settings file %s", self.settings_path)
            return None

    def save_settings(self, settings: AppSettings) -> None:
        with self._lock:
            self._write(self.settings_path, settings.model_dump_json())

    # Chats
    def get_chats(self) -> List[ChatSummary]:
        with self._lock:
            raw = self._read(self.chats_path)
        if not raw:
            return []
        try:
            return _chats_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring unreadable chat history %s", self.chats_path)
            return []

    def save_chats(self, chats: List[ChatSummary]) -> None:
        with self._lock:
            self._write(self.chats_path, json.dumps(_chats_adapter.dump_python(chats, mode="json")))

    def clear_all(self) -> None:
        with self._lock:
            self.settings_path.unlink(missing_ok=True)
            self.chats_path.unlink(missing_ok=True)
