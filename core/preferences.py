"""Persisted UI preferences: table page size and filter-bar collapse flag."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from core.filters import DEFAULT_PAGE_SIZE, PageSize, normalize_page_size

logger = logging.getLogger(__name__)

PREFS_ENV = "SALES_DASHBOARD_PREFS"
PREFS_KEY = "dashboard-ui-state"


def default_prefs_path() -> Path:
    override = os.environ.get(PREFS_ENV)
    if override:
        return Path(override)
    return Path.home() / ".sales_dashboard" / "ui_state.json"


class PreferenceStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_prefs_path()

    def _read(self) -> Dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences at %s: %s", self.path, exc)
            return {}
        state = raw.get(PREFS_KEY) if isinstance(raw, dict) else None
        return state if isinstance(state, dict) else {}

    def load(self) -> Dict[str, Any]:
        state = self._read()
        page_size = state.get("pageSize")
        return {
            "filterbar_collapsed": bool(state.get("filterbarCollapsed", False)),
            "page_size": normalize_page_size(page_size) if page_size is not None else DEFAULT_PAGE_SIZE,
        }

    def save(self, *, filterbar_collapsed: bool, page_size: PageSize) -> bool:
        # page size is stored as the selector's string value
        payload = {PREFS_KEY: {"filterbarCollapsed": bool(filterbar_collapsed), "pageSize": str(page_size)}}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as fh:
                json.dump(payload, fh)
        except OSError as exc:
            logger.warning("Could not persist preferences to %s: %s", self.path, exc)
            return False
        return True
