from __future__ import annotations
import hashlib
import json
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from .models import Snapshot

logger = logging.getLogger(__name__)


def canonical_bytes(snapshot: Snapshot) -> bytes:
    return json.dumps(snapshot.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")


def fingerprint(snapshot: Snapshot) -> bytes:
    return hashlib.sha256(canonical_bytes(snapshot)).digest()


@dataclass(frozen=True)
class LastPublished:
    fingerprint: bytes
    snapshot: Snapshot


class ChangeGate:
    """Suppresses snapshots whose content matches the last accepted one."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._last: Optional[LastPublished] = None

    @property
    def last(self) -> Optional[LastPublished]:
        return self._last

    def offer(self, snapshot: Snapshot) -> bool:
        fp = fingerprint(snapshot)
        # compare-then-update must be atomic across concurrent cycles
        with self._lock:
            if self._last is not None and self._last.fingerprint == fp:
                return False
            self._last = LastPublished(fingerprint=fp, snapshot=snapshot)
        logger.debug("Snapshot accepted (fingerprint=%s)", fp.hex()[:16])
        return True
