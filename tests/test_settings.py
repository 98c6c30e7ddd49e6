from __future__ import annotations

import json
from pathlib import Path

from flipmatch.paths import get_paths
from flipmatch.services.settings import GameSettings, SettingsService


def _service(tmp_path: Path) -> SettingsService:
    return SettingsService(tmp_path / "settings.json", get_paths().schema_dir)


def test_defaults_written_on_first_run(tmp_path: Path) -> None:
    svc = _service(tmp_path)
    assert svc.settings == GameSettings()
    raw = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert raw["rows"] == 3
    assert raw["enable_preview"] is True


def test_bad_fields_fall_back_individually() -> None:
    s = GameSettings.from_dict(
        {
            "enable_preview": "yes",
            "preview_duration": 0.1,
            "allow_continuous_flipping": False,
            "mismatch_delay": True,
            "rows": 3,
            "columns": 3,
        }
    )
    assert s.enable_preview is True
    assert s.preview_duration == 0.5
    assert s.allow_continuous_flipping is False
    assert s.mismatch_delay == 1.5
    assert (s.rows, s.columns) == (3, 4)


def test_changes_persist(tmp_path: Path) -> None:
    svc = _service(tmp_path)
    svc.set_preview(False, 0.2)
    svc.set_continuous_flipping(False)
    assert svc.set_grid_size(4, 5)
    assert not svc.set_grid_size(5, 5)

    again = _service(tmp_path)
    assert again.settings.enable_preview is False
    assert again.settings.preview_duration == 0.5
    assert again.settings.allow_continuous_flipping is False
    assert (again.settings.rows, again.settings.columns) == (4, 5)


def test_unreadable_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text("[1, 2", encoding="utf-8")
    assert _service(tmp_path).settings == GameSettings()


def test_engine_config_from_settings() -> None:
    cfg = GameSettings(enable_preview=False, preview_duration=3.0, rows=2, columns=4).to_engine_config()
    assert cfg.enable_preview is False
    assert cfg.preview_duration == 3.0
    assert (cfg.default_rows, cfg.default_columns) == (2, 4)
    assert cfg.max_flipped_cards == 2


def test_undecodable_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_bytes(b"\xff\xfe\x00")
    assert _service(tmp_path).settings == GameSettings()
