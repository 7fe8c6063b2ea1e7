from __future__ import annotations

import hashlib
from datetime import datetime, timezone

_SECONDS_PER_DAY = 60 * 60 * 24
FINGERPRINT_LENGTH = 12


def derive_fingerprint(client_signature: str, now: datetime | None = None) -> str:
    """Return a coarse per-day key for a browser signature.

    The key changes once per UTC day, so the same browser can answer again
    tomorrow. This only discourages repeat submissions; it identifies nobody.
    """

    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    day_number = int(moment.timestamp()) // _SECONDS_PER_DAY
    digest = hashlib.blake2b(f"{client_signature}_{day_number}".encode("utf-8"), digest_size=8)
    return digest.hexdigest()[:FINGERPRINT_LENGTH]


__all__ = ["FINGERPRINT_LENGTH", "derive_fingerprint"]
