"""Company settings provider.

Reads the company display details (name, contact email, phone, address,
website) used in email sign-offs from a JSON file and keeps them in the
settings cache, so the file is read at most once per cache lifetime.

The file may hold the settings object directly or nest it under a
``company_settings`` key. A missing or unreadable file is not an error:
emails are signed with the sender name instead.

Version: 1.0.0
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from mail_dispatch.core.cache import SettingsCache
from mail_dispatch.core.logger import get_logger
from mail_dispatch.models.context import CompanySettings

logger = get_logger(__name__)


class CompanySettingsProvider:
    """Cached access to the company settings file.

    Attributes:
        cache: Shared settings cache.
        settings_file: Path to the JSON settings file (None disables lookup).
    """

    CACHE_KEY = "company_settings"

    def __init__(
        self, cache: SettingsCache, settings_file: str | Path | None = None
    ) -> None:
        self.cache = cache
        self.settings_file = Path(settings_file) if settings_file else None

    def get(self) -> CompanySettings | None:
        """Return company settings, loading them on a cache miss."""
        return self.cache.get_or_load(self.CACHE_KEY, self._load)

    def refresh(self) -> CompanySettings | None:
        """Drop the cached entry and reload from disk."""
        self.cache.invalidate(self.CACHE_KEY)
        return self.get()

    def _load(self) -> CompanySettings | None:
        if self.settings_file is None:
            return None

        logger.debug(f"Loading company settings: {self.settings_file}")

        try:
            raw = json.loads(self.settings_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning(f"Company settings file not found: {self.settings_file}")
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read company settings: {e}")
            return None

        if isinstance(raw, dict) and isinstance(raw.get("company_settings"), dict):
            raw = raw["company_settings"]

        try:
            company = CompanySettings.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Invalid company settings: {e.error_count()} error(s)")
            return None

        logger.info(f"Company settings loaded: {company.name or '(unnamed)'}")
        return company
