"""JSON Schema checks for the catalog seed and operator payloads."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"


class SchemaRegistry:
    """One compiled validator per ``<name>.json`` file in ``schema_dir``."""

    def __init__(self, schema_dir: Path) -> None:
        self._validators: dict[str, Draft202012Validator] = {}
        for schema_path in sorted(schema_dir.glob("*.json")):
            schema = json.loads(schema_path.read_text())
            Draft202012Validator.check_schema(schema)
            self._validators[schema_path.stem] = Draft202012Validator(schema)

    def names(self) -> list[str]:
        return sorted(self._validators)

    def errors(self, schema_name: str, payload: Any) -> list[str]:
        """Every violation as ``<path>: <message>``, ordered by path."""
        found = sorted(self._get(schema_name).iter_errors(payload), key=lambda err: [str(part) for part in err.path])
        return [f"{'/'.join(str(part) for part in err.path) or '$'}: {err.message}" for err in found]

    def validate(self, schema_name: str, payload: Any) -> None:
        self._get(schema_name).validate(payload)

    def _get(self, schema_name: str) -> Draft202012Validator:
        try:
            return self._validators[schema_name]
        except KeyError as exc:
            raise ValueError(f"unknown schema {schema_name}") from exc


@lru_cache(maxsize=1)
def get_schema_registry() -> SchemaRegistry:
    return SchemaRegistry(_SCHEMA_DIR)
