"""
JSON-file key-value store for the user profile.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from mindfeed.config import settings
from mindfeed.schemas import DEFAULT_PREFERENCES, UserPreferences

logger = logging.getLogger(__name__)


class PreferencesStore:
    """Loads the profile once at startup and saves it on every change.

    The file holds a ``{key: text}`` map; the profile lives under ``namespace``
    as serialized JSON text.
    """

    def __init__(self, path: Optional[str | Path] = None, namespace: Optional[str] = None):
        self.path = Path(path or settings.PREFERENCES_PATH)
        self.namespace = namespace or settings.PREFERENCES_NAMESPACE

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Preferences file %s is unreadable: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> UserPreferences:
        """Stored profile, or the built-in default when missing or corrupt."""
        saved = self._read_all().get(self.namespace)
        if not saved:
            return DEFAULT_PREFERENCES
        try:
            return UserPreferences.model_validate_json(saved)
        except ValidationError as e:
            logger.error("Failed to parse saved preferences: %s", e)
            return DEFAULT_PREFERENCES

    def save(self, preferences: UserPreferences) -> None:
        data = self._read_all()
        data[self.namespace] = preferences.model_dump_json()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash never leaves a half-written profile
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".prefs-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
