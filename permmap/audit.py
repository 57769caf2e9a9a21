# permmap - Audit trail for authorization checks
import threading
from collections import deque
from pathlib import Path

from .models import AuditLogEntry

DEFAULT_MEMORY_LIMIT = 1000


class AuditLog:
    """Most recent audit entries in memory, optionally every entry appended to a JSONL file."""

    def __init__(self, path: Path | None = None, memory_limit: int = DEFAULT_MEMORY_LIMIT):
        self.path = Path(path) if path is not None else None
        self._entries: deque[AuditLogEntry] = deque(maxlen=max(memory_limit, 0))
        self._total = 0
        self._lock = threading.Lock()

    def record(self, entry: AuditLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            self._total += 1
            if self.path is None:
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(entry.model_dump_json() + "\n")

    def sample(self, limit: int = 50) -> list[dict]:
        """Return the most recent entries, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            entries = list(self._entries)[-limit:]
        return [e.model_dump(mode="json") for e in entries]

    @property
    def total(self) -> int:
        """Number of entries recorded, including ones no longer held in memory."""
        return self._total

    def __len__(self) -> int:
        return len(self._entries)
