from __future__ import annotations

import threading
from typing import Dict

_SURVEY_LOCKS: Dict[str, threading.Lock] = {}
_SURVEY_LOCKS_GUARD = threading.Lock()


def survey_lock(survey_id: str) -> threading.Lock:
    """Return the lock serializing writes to one survey's responses."""

    with _SURVEY_LOCKS_GUARD:
        lock = _SURVEY_LOCKS.get(survey_id)
        if lock is None:
            lock = _SURVEY_LOCKS[survey_id] = threading.Lock()
        return lock


def forget_survey_lock(survey_id: str) -> None:
    """Drop the lock of a deleted survey."""

    with _SURVEY_LOCKS_GUARD:
        _SURVEY_LOCKS.pop(survey_id, None)


def tracked_surveys() -> set[str]:
    with _SURVEY_LOCKS_GUARD:
        return set(_SURVEY_LOCKS)


__all__ = ["forget_survey_lock", "survey_lock", "tracked_surveys"]
