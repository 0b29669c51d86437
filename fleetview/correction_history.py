# fleetview/correction_history.py
from __future__ import annotations
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional
import threading

from .models import Correction, CorrectionRecord


class CorrectionHistory:
    """
    Rolling log of coordinate corrections for the debug overlay.
    - record(identifier, correction, kind) appends one entry; the oldest entry drops out past `size`.
    - total counts every correction ever recorded, including the ones that rolled out of the window.
    One instance may be shared by concurrent requests; every read and write goes through the lock.
    """
    def __init__(self, size: int = 50):
        self.size = size
        self.entries: Deque[CorrectionRecord] = deque(maxlen=size)
        self.total = 0
        self._lock = threading.Lock()

    def record(self, identifier: str, correction: Correction, kind: str = "route",
               when: Optional[datetime] = None) -> CorrectionRecord:
        if kind == "position":
            message = "Current location corrected"
        else:
            message = f"Waypoint {correction.waypoint_id} corrected"
        entry = CorrectionRecord(
            timestamp=when or datetime.now(timezone.utc),
            identifier=identifier,
            kind=kind,
            original=correction.original,
            corrected=correction.corrected,
            message=message,
        )
        with self._lock:
            self.entries.append(entry)
            self.total += 1
        return entry

    def recent(self, n: int = 10) -> List[CorrectionRecord]:
        if n <= 0:
            return []
        with self._lock:
            return list(self.entries)[-n:]

    def clear(self) -> None:
        with self._lock:
            self.entries.clear()
            self.total = 0

    def stats(self) -> Dict[str, int]:
        by_kind = {"position": 0, "route": 0}
        with self._lock:
            for e in self.entries:
                by_kind[e.kind] += 1
            return {"total": self.total, "kept": len(self.entries), **by_kind}

    def __len__(self) -> int:
        with self._lock:
            return len(self.entries)
