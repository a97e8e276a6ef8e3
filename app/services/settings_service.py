"""Site settings (``settings`` table) behind a small process-local TTL cache.

The caches are best-effort: losing them on restart only costs a query.
"""
import logging
import time
from typing import Callable, Dict, List, Optional

from app.core.config import SETTINGS_CACHE_TTL, MAINTENANCE_CACHE_TTL
from app.db.supabase import get_client, first_row, log_query_error

logger = logging.getLogger(__name__)

MAINTENANCE_KEY = "maintenance_mode"


class SettingsService:
    def __init__(self, ttl: float = SETTINGS_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._cache: Dict[str, str] = {}
        self._fetched_at: Optional[float] = None

    def _fresh(self) -> bool:
        return self._fetched_at is not None and self.clock() - self._fetched_at < self.ttl

    def fetch_all_settings(self) -> Dict[str, str]:
        """All non-null settings; the previous snapshot is kept if the refresh fails."""
        if self._fresh():
            return self._cache
        try:
            res = get_client().table("settings").select("key, value").execute()
        except Exception as e:
            log_query_error(logger, "Error fetching settings", e)
            return self._cache
        self._cache = {row["key"]: row["value"] for row in res.data or [] if row.get("value") is not None}
        self._fetched_at = self.clock()
        return self._cache

    def get_setting(self, key: str) -> Optional[str]:
        return self.fetch_all_settings().get(key) or None

    def get_settings(self, keys: List[str]) -> Dict[str, Optional[str]]:
        settings = self.fetch_all_settings()
        return {key: settings.get(key) or None for key in keys}

    def get_settings_by_category(self, category: str) -> Dict[str, Optional[str]]:
        try:
            res = get_client().table("settings").select("key, value").eq("category", category).execute()
        except Exception as e:
            log_query_error(logger, f"Error fetching settings of category {category}", e)
            return {}
        return {row["key"]: row["value"] for row in res.data or []}

    def is_enabled(self, key: str) -> bool:
        return self.get_setting(key) == "true"

    def update_setting(self, key: str, value: Optional[str], updated_by: Optional[str] = None) -> Optional[dict]:
        changes = {"value": value}
        if updated_by:
            changes["updated_by"] = updated_by
        try:
            res = get_client().table("settings").update(changes).eq("key", key).execute()
        except Exception as e:
            logger.error("Error updating setting %s: %s", key, e)
            return None
        self.clear_cache()
        if key == MAINTENANCE_KEY:
            maintenance_check.clear_cache()
        return first_row(res)

    def clear_cache(self):
        self._cache = {}
        self._fetched_at = None


class MaintenanceCheck:
    """Answers "is the site in maintenance mode?" with a short-lived cached value."""

    def __init__(self, ttl: float = MAINTENANCE_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._value: Optional[bool] = None
        self._checked_at: Optional[float] = None

    def is_maintenance_mode(self) -> bool:
        now = self.clock()
        if self._checked_at is not None and now - self._checked_at < self.ttl:
            return self._value
        try:
            res = (get_client().table("settings").select("value")
                   .eq("key", MAINTENANCE_KEY).maybe_single().execute())
        except Exception as e:
            log_query_error(logger, "Error checking maintenance mode", e)
            return False
        row = first_row(res)
        self._value = bool(row) and row.get("value") == "true"
        self._checked_at = now
        return self._value

    def clear_cache(self):
        self._value = None
        self._checked_at = None


settings_service = SettingsService()
maintenance_check = MaintenanceCheck()
