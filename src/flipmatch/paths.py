from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

USERDATA_ENV = "FLIPMATCH_USERDATA_DIR"


@dataclass(frozen=True)
class Paths:
    repo_root: Path
    data_dir: Path
    schema_dir: Path
    userdata_dir: Path

    @property
    def save_path(self) -> Path:
        return self.userdata_dir / "savegame.json"

    @property
    def settings_path(self) -> Path:
        return self.userdata_dir / "settings.json"

    @property
    def telemetry_path(self) -> Path:
        return self.userdata_dir / "telemetry.jsonl"


def get_paths() -> Paths:
    # src/flipmatch/paths.py -> parents: [flipmatch, src, repo_root]
    package_dir = Path(__file__).resolve().parent
    repo_root = package_dir.parents[1]
    data_dir = package_dir / "data"
    override = os.getenv(USERDATA_ENV)
    userdata_dir = Path(override) if override else repo_root / "userdata"
    return Paths(
        repo_root=repo_root,
        data_dir=data_dir,
        schema_dir=data_dir / "schemas",
        userdata_dir=userdata_dir,
    )
