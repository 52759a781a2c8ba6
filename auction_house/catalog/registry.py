"""Team and player catalog backed by YAML seed data."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from ..auction.models import Item, Team
from ..validation.validator import SchemaRegistry, get_schema_registry


class CatalogRegistry:
    """Read-once seed of teams and players.

    The records are frozen dataclasses, so every engine reset can start from
    the same tuples without copying.
    """

    def __init__(self, data: Mapping[str, Any], schemas: SchemaRegistry | None = None) -> None:
        (schemas or get_schema_registry()).validate("catalog", dict(data))
        self._teams = tuple(_build_team(entry) for entry in data.get("teams", []))
        self._items = tuple(_build_item(entry) for entry in data.get("players", []))
        _assert_unique("team", [team.team_id for team in self._teams])
        _assert_unique("player", [item.item_id for item in self._items])

    @classmethod
    def from_path(cls, path: Path, schemas: SchemaRegistry | None = None) -> "CatalogRegistry":
        data = yaml.safe_load(path.read_text()) or {}
        return cls(data, schemas)

    def teams(self) -> tuple[Team, ...]:
        return self._teams

    def items(self) -> tuple[Item, ...]:
        return self._items


def _build_team(entry: Mapping[str, Any]) -> Team:
    return Team(
        team_id=int(entry["id"]),
        name=entry["name"],
        budget=int(entry["budget"]),
        short_name=entry.get("short_name", ""),
        city=entry.get("city", ""),
        color=entry.get("color", ""),
        logo=entry.get("logo", ""),
    )


def _build_item(entry: Mapping[str, Any]) -> Item:
    return Item(
        item_id=int(entry["id"]),
        name=entry["name"],
        base_price=int(entry["base_price"]),
        position=entry.get("position", ""),
        nationality=entry.get("nationality", ""),
        age=entry.get("age"),
        rating=entry.get("rating"),
        avatar=entry.get("avatar", ""),
    )


def _assert_unique(kind: str, ids: list[int]) -> None:
    seen: set[int] = set()
    for value in ids:
        if value in seen:
            raise ValueError(f"duplicate {kind} id {value}")
        seen.add(value)
