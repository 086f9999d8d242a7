# settings.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

import streamlit as st
import gspread
from google.oauth2.service_account import Credentials

from storage.gsheets import GSheetsConfig, SleepGSheets
from storage.memory import MemoryStore
from storage.repo import SleepRepo


DEFAULT_SPREADSHEET_NAME = "SleepFormula_DB"
DEFAULT_TIMEZONE = "Asia/Seoul"


@dataclass
class AppSettings:
    spreadsheet_name: str = DEFAULT_SPREADSHEET_NAME
    timezone_name: str = DEFAULT_TIMEZONE
    service_account_info: Optional[Dict[str, Any]] = None

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    @property
    def uses_gsheets(self) -> bool:
        return bool(self.service_account_info)


def _read_secrets() -> Dict[str, Any]:
    try:
        return dict(st.secrets)
    except FileNotFoundError:
        # no secrets.toml
        return {}


def load_settings() -> AppSettings:
    """
    Reads Streamlit secrets:
      st.secrets["gcp_service_account"] = { ... service account json ... }  (optional)
      st.secrets["spreadsheet_name"] = "SleepFormula_DB"                      (optional)
      st.secrets["timezone"] = "Asia/Seoul"                                   (optional)
    Without a service account the app keeps data in memory for the session.
    """
    secrets = _read_secrets()
    sa = dict(secrets["gcp_service_account"]) if secrets.get("gcp_service_account") else None
    name = str(secrets.get("spreadsheet_name", "") or "").strip() or DEFAULT_SPREADSHEET_NAME
    tz_name = str(secrets.get("timezone", "") or "").strip() or DEFAULT_TIMEZONE

    return AppSettings(spreadsheet_name=name, timezone_name=tz_name, service_account_info=sa)


# ----------------------------
# Repo factory
# ----------------------------

def make_gspread_client(service_account_info: Dict[str, Any]) -> gspread.Client:
    creds = Credentials.from_service_account_info(
        service_account_info,
        scopes=[
            "https://www.googleapis.com/auth/spreadsheets",
            "https://www.googleapis.com/auth/drive",
        ],
    )
    return gspread.authorize(creds)


@st.cache_resource
def _build_gsheets_repo(_service_account_info: Dict[str, Any], spreadsheet_name: str, timezone_name: str) -> SleepRepo:
    gc = make_gspread_client(_service_account_info)
    db = SleepGSheets(gc, GSheetsConfig(spreadsheet_name=spreadsheet_name))
    return SleepRepo(db, tz=ZoneInfo(timezone_name))


def get_repo(settings: AppSettings) -> SleepRepo:
    """
    Cached gsheets repo when a service account is configured,
    otherwise a per-session in-memory repo.
    """
    if settings.uses_gsheets:
        return _build_gsheets_repo(settings.service_account_info, settings.spreadsheet_name, settings.timezone_name)

    if "memory_repo" not in st.session_state:
        st.session_state["memory_repo"] = SleepRepo(MemoryStore(), tz=settings.tz)
    return st.session_state["memory_repo"]
