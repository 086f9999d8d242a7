# storage/gsheets.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Dict, Any, List, Tuple
import datetime as dt
import random
import time

import gspread
from gspread.exceptions import APIError, WorksheetNotFound


# ----------------------------
# Config
# ----------------------------

@dataclass
class GSheetsConfig:
    spreadsheet_name: str = "SleepFormula_DB"
    kv_ws: str = "kv"
    audit_logs_ws: str = "audit_logs"

    # Columns
    # kv:
    #   key, value, updated_at
    #   value holds the JSON text of one named collection
    #
    # audit_logs:
    #   timestamp, level, action, detail


KV_HEADERS = ["key", "value", "updated_at"]
AUDIT_HEADERS = ["timestamp", "level", "action", "detail"]

READ_TTL_SEC = 20.0


# ----------------------------
# Utilities
# ----------------------------

def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def _is_retryable_api_error(exc: Exception) -> bool:
    if isinstance(exc, APIError):
        code = getattr(getattr(exc, "response", None), "status_code", None)
        if code in (429, 500, 502, 503, 504):
            return True
    text = str(exc).lower()
    return any(k in text for k in ("timeout", "temporarily", "rate limit", "connection reset", "503"))


def _with_retry(op: str, fn, attempts: int = 4, base_delay: float = 0.25):
    """Run fn, backing off exponentially on transient API errors; final failure -> RuntimeError."""
    attempts = max(1, attempts)
    for i in range(attempts):
        try:
            return fn()
        except Exception as e:
            if i == attempts - 1 or not _is_retryable_api_error(e):
                raise RuntimeError(f"GSheets operation failed: {op}: {e}") from e
            time.sleep(base_delay * (2 ** i) + random.uniform(0.0, 0.15))


def _column_name(n: int) -> str:
    """1 -> A, 26 -> Z, 27 -> AA"""
    name = ""
    while n > 0:
        n, rem = divmod(n - 1, 26)
        name = chr(ord("A") + rem) + name
    return name


def _row_range(row_idx: int, width: int) -> str:
    return f"A{row_idx}:{_column_name(width)}{row_idx}"


def _ensure_header_row(ws, headers: List[str]) -> List[str]:
    """Returns the worksheet header; writes it on an empty sheet and appends missing columns."""
    current = _with_retry("row_values(header)", lambda: ws.row_values(1))
    if not current:
        _with_retry("append_row(header)", lambda: ws.append_row(list(headers)))
        return list(headers)
    missing = [h for h in headers if h not in current]
    if not missing:
        return list(current)
    merged = list(current) + missing
    _with_retry("update(header)", lambda: ws.update(range_name=_row_range(1, len(merged)), values=[merged]))
    return merged


def _to_row(header: List[str], data: Dict[str, Any]) -> List[str]:
    return ["" if data.get(h) is None else str(data.get(h)) for h in header]


# ----------------------------
# Main client
# ----------------------------

class SleepGSheets:
    """
    Key/value store on a Google spreadsheet.
    One row per named collection in the kv worksheet.
    """
    def __init__(self, gc: gspread.Client, cfg: Optional[GSheetsConfig] = None):
        self.gc = gc
        self.cfg = cfg or GSheetsConfig()
        self._read_cache: Dict[str, Tuple[float, List[Dict[str, Any]]]] = {}

        self.sh = _with_retry("open(spreadsheet)", lambda: self.gc.open(self.cfg.spreadsheet_name))
        self.kv = self._get_or_create_ws(self.cfg.kv_ws)
        self.audit_logs = self._get_or_create_ws(self.cfg.audit_logs_ws)

        self.kv_header = _ensure_header_row(self.kv, KV_HEADERS)
        self.audit_header = _ensure_header_row(self.audit_logs, AUDIT_HEADERS)

    def _get_or_create_ws(self, title: str):
        try:
            return _with_retry(f"worksheet({title})", lambda: self.sh.worksheet(title))
        except RuntimeError as e:
            if not isinstance(e.__cause__, WorksheetNotFound):
                raise
            return _with_retry(f"add_worksheet({title})", lambda: self.sh.add_worksheet(title=title, rows=200, cols=10))

    def _rows(self, name: str, ws) -> List[Dict[str, Any]]:
        hit = self._read_cache.get(name)
        if hit and time.time() < hit[0]:
            return hit[1]
        # numericise_ignore keeps JSON text and "08" style values as strings
        rows = _with_retry(f"get_all_records({name})", lambda: ws.get_all_records(numericise_ignore=["all"]))
        self._read_cache[name] = (time.time() + READ_TTL_SEC, rows)
        return rows

    # -------- Key/value --------

    def get_value(self, key: str) -> Optional[str]:
        k = str(key).strip()
        for r in self._rows("kv", self.kv):
            if str(r.get("key", "")).strip() == k:
                return str(r.get("value", ""))
        return None

    def set_value(self, key: str, value: str) -> None:
        """Upsert by key; duplicate rows for the same key are removed."""
        k = str(key).strip()
        # records start at sheet row 2
        matches = [i for i, r in enumerate(self._rows("kv", self.kv), start=2) if str(r.get("key", "")).strip() == k]
        row = _to_row(self.kv_header, {"key": k, "value": value, "updated_at": _now_iso()})
        try:
            if not matches:
                _with_retry("append_row(kv)", lambda: self.kv.append_row(row))
                return
            first = matches[0]
            _with_retry("update(kv)", lambda: self.kv.update(range_name=_row_range(first, len(row)), values=[row]))
            for idx in reversed(matches[1:]):
                _with_retry("delete_rows(duplicate_key)", lambda i=idx: self.kv.delete_rows(i))
        finally:
            self._read_cache.pop("kv", None)

    # -------- Audit log --------

    def append_audit_log(self, level: str, action: str, detail: str) -> None:
        row = _to_row(
            self.audit_header,
            {
                "timestamp": _now_iso(),
                "level": str(level or "info"),
                "action": str(action or ""),
                "detail": str(detail or ""),
            },
        )
        try:
            _with_retry("append_row(audit_logs)", lambda: self.audit_logs.append_row(row))
        except RuntimeError:
            # Never fail main flow because audit log append failed.
            return
        self._read_cache.pop("audit_logs", None)

    def get_recent_audit_logs(self, limit: int = 50) -> List[Dict[str, Any]]:
        out = sorted(self._rows("audit_logs", self.audit_logs), key=lambda r: str(r.get("timestamp", "")), reverse=True)
        return out[: max(0, int(limit))]
