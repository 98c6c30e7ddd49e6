from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from flipmatch.engine.grid import is_valid_grid_size
from flipmatch.engine.matching import MIN_PREVIEW_DURATION, EngineConfig

from .schemas import load_schema, schema_errors

logger = logging.getLogger(__name__)


def _bool(d: Mapping[str, object], key: str, default: bool) -> bool:
    v = d.get(key, default)
    return v if isinstance(v, bool) else default


def _number(d: Mapping[str, object], key: str, default: float, minimum: float) -> float:
    v = d.get(key, default)
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return default
    return max(minimum, float(v))


def _int(d: Mapping[str, object], key: str, default: int) -> int:
    v = d.get(key, default)
    if isinstance(v, bool) or not isinstance(v, int):
        return default
    return v


@dataclass
class GameSettings:
    enable_preview: bool = True
    preview_duration: float = 2.0
    allow_continuous_flipping: bool = True
    mismatch_delay: float = 1.5
    rows: int = 3
    columns: int = 4

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "GameSettings":
        defaults = GameSettings()
        rows = _int(d, "rows", defaults.rows)
        columns = _int(d, "columns", defaults.columns)
        if not is_valid_grid_size(rows, columns):
            rows, columns = defaults.rows, defaults.columns
        return GameSettings(
            enable_preview=_bool(d, "enable_preview", defaults.enable_preview),
            preview_duration=_number(d, "preview_duration", defaults.preview_duration, MIN_PREVIEW_DURATION),
            allow_continuous_flipping=_bool(d, "allow_continuous_flipping", defaults.allow_continuous_flipping),
            mismatch_delay=_number(d, "mismatch_delay", defaults.mismatch_delay, 0.0),
            rows=rows,
            columns=columns,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "version": 1,
            "enable_preview": self.enable_preview,
            "preview_duration": self.preview_duration,
            "allow_continuous_flipping": self.allow_continuous_flipping,
            "mismatch_delay": self.mismatch_delay,
            "rows": self.rows,
            "columns": self.columns,
        }

    def to_engine_config(self) -> EngineConfig:
        return EngineConfig(
            mismatch_delay=self.mismatch_delay,
            allow_continuous_flipping=self.allow_continuous_flipping,
            enable_preview=self.enable_preview,
            preview_duration=self.preview_duration,
            default_rows=self.rows,
            default_columns=self.columns,
        )


class SettingsService:
    def __init__(self, path: Path, schema_dir: Path) -> None:
        self._path = path
        self._schema = load_schema(schema_dir, "settings")
        self.settings = self._load_or_create()

    def _load_or_create(self) -> GameSettings:
        if not self._path.exists():
            settings = GameSettings()
            self._write(settings)
            return settings
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Unreadable settings at %s (%s); using defaults", self._path, e)
            return GameSettings()
        if not isinstance(raw, dict):
            logger.warning("Settings at %s are not an object; using defaults", self._path)
            return GameSettings()
        for err in schema_errors(raw, self._schema):
            logger.warning("Settings field ignored: %s", err)
        return GameSettings.from_dict(raw)

    def _write(self, settings: GameSettings) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")

    def save(self) -> None:
        self._write(self.settings)

    # -------- Setters --------
    def set_preview(self, enabled: bool, duration: float) -> None:
        self.settings.enable_preview = enabled
        self.settings.preview_duration = max(MIN_PREVIEW_DURATION, duration)
        self.save()

    def set_continuous_flipping(self, value: bool) -> None:
        self.settings.allow_continuous_flipping = value
        self.save()

    def set_grid_size(self, rows: int, columns: int) -> bool:
        if not is_valid_grid_size(rows, columns):
            return False
        self.settings.rows = rows
        self.settings.columns = columns
        self.save()
        return True
