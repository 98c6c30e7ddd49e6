from __future__ import annotations

import json
import logging
from pathlib import Path

from flipmatch.engine.providers import PersistenceError
from flipmatch.engine.snapshot import GameSnapshot

from .schemas import load_schema, schema_errors

logger = logging.getLogger(__name__)

SAVE_VERSION = 1


class JsonSaveStore:
    """Keeps one in-progress game as a JSON document on disk.

    The document wraps the snapshot as `{"version": 1, "game": {...}}` and
    is validated against `save.schema.json` on both write and read.
    """

    def __init__(self, path: Path, schema_dir: Path) -> None:
        self._path = path
        self._schema = load_schema(schema_dir, "save")

    @property
    def path(self) -> Path:
        return self._path

    def has_saved_game(self) -> bool:
        return self._path.is_file()

    def save_game(self, snapshot: GameSnapshot) -> None:
        doc = {"version": SAVE_VERSION, "game": snapshot.to_dict()}
        errors = schema_errors(doc, self._schema)
        if errors:
            raise PersistenceError(f"Refusing to write invalid save: {errors[0]}")
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(doc, indent=2), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as e:
            raise PersistenceError(f"Could not write {self._path}: {e}") from e

    def load_game(self) -> GameSnapshot | None:
        if not self.has_saved_game():
            return None
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise PersistenceError(f"Could not read {self._path}: {e}") from e
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Invalid JSON in {self._path}: {e}") from e

        errors = schema_errors(raw, self._schema)
        if errors:
            raise PersistenceError(f"Save file {self._path} failed validation: {errors[0]}")
        assert isinstance(raw, dict)
        game = raw["game"]
        return GameSnapshot.from_dict(game)

    def clear_saved_game(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Could not remove {self._path}: {e}") from e
        logger.debug("Cleared saved game at %s", self._path)
