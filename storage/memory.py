# storage/memory.py
from __future__ import annotations

from typing import Any, Dict, List, Optional
import datetime as dt


class MemoryStore:
    """
    In-process key/value store with the same surface as SleepGSheets.
    Used when no service account is configured, and in tests.
    """
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})
        self.audit_logs: List[Dict[str, Any]] = []

    def get_value(self, key: str) -> Optional[str]:
        return self._values.get(str(key).strip())

    def set_value(self, key: str, value: str) -> None:
        self._values[str(key).strip()] = str(value)

    def append_audit_log(self, level: str, action: str, detail: str) -> None:
        self.audit_logs.append(
            {
                "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
                "level": str(level or "info"),
                "action": str(action or ""),
                "detail": str(detail or ""),
            }
        )

    def get_recent_audit_logs(self, limit: int = 50) -> List[Dict[str, Any]]:
        # appended in order, so newest is last
        return list(reversed(self.audit_logs))[: max(0, int(limit))]
