from __future__ import annotations

import json
from pathlib import Path

from jsonschema import Draft202012Validator


class SchemaError(RuntimeError):
    pass


def load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SchemaError(f"Missing file: {path}") from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON in {path}: {e}") from e


def load_schema(schema_dir: Path, name: str) -> object:
    return load_json(schema_dir / f"{name}.schema.json")


def schema_errors(instance: object, schema: object) -> list[str]:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    return [f"{'/'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}" for err in errors]


def validate_json(instance: object, schema: object, *, context: str) -> None:
    errors = schema_errors(instance, schema)
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        lines.extend(f"- {e}" for e in errors[:10])
        raise SchemaError("\n".join(lines))
