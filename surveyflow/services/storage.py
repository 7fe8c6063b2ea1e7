from __future__ import annotations

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from surveyflow.core.config import settings

logger = logging.getLogger(__name__)

SURVEYS_KEY = "survey_templates"
LINKS_KEY = "survey_links"
SESSION_USER_KEY = "survey_admin_user"
RESPONSES_KEY_PREFIX = "responses:"


def responses_key(survey_id: str) -> str:
    """Return the storage key holding the response collection of a survey."""

    return f"{RESPONSES_KEY_PREFIX}{survey_id}"


class StoragePort(Protocol):
    """Key/value store of JSON documents. Last write wins."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryStorage(StoragePort):
    """Process-local storage, used by tests and previews."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(key)
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        # Round-trip through JSON so callers cannot store what the file backend would reject.
        document = json.loads(json.dumps(value))
        with self._lock:
            self._data[key] = document

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


class JsonFileStorage(StoragePort):
    """Single JSON file holding every key, rewritten on each change."""

    def __init__(self, storage_path: Path) -> None:
        self._path = Path(storage_path)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            payload = self._read_all_unlocked()
        return payload.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            payload = self._read_all_unlocked()
            payload[key] = value
            self._write_all_unlocked(payload)

    def remove(self, key: str) -> None:
        with self._lock:
            payload = self._read_all_unlocked()
            if key not in payload:
                return
            del payload[key]
            self._write_all_unlocked(payload)

    def _read_all_unlocked(self) -> Dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            return json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Storage file %s is not valid JSON; starting from an empty store", self._path)
            return {}

    def _write_all_unlocked(self, payload: Dict[str, Any]) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)


_STORAGE_INSTANCE: Optional[StoragePort] = None
_STORAGE_LOCK = threading.Lock()


def get_storage() -> StoragePort:
    """Return the shared storage instance backed by the configured JSON file."""

    global _STORAGE_INSTANCE
    if _STORAGE_INSTANCE is None:
        with _STORAGE_LOCK:
            if _STORAGE_INSTANCE is None:
                _STORAGE_INSTANCE = JsonFileStorage(settings.storage_path)
    return _STORAGE_INSTANCE


__all__ = [
    "InMemoryStorage",
    "JsonFileStorage",
    "LINKS_KEY",
    "SESSION_USER_KEY",
    "SURVEYS_KEY",
    "StoragePort",
    "get_storage",
    "responses_key",
]
