"""Configuration helpers for the auction server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml

_DEFAULT_SERVER_CONFIG = Path(__file__).resolve().parent / "server.yaml"
_DEFAULT_CATALOG = Path(__file__).resolve().parent / "catalog.yaml"

DEFAULT_INCREMENTS: tuple[tuple[int, int], ...] = ((0, 100_000), (3_000_000, 200_000))


@dataclass(frozen=True)
class AuctionConfig:
    timer_seconds: int = 180
    tick_seconds: float = 1.0
    sale_display_seconds: float = 5.0
    unsold_resume_seconds: float = 0.8
    max_rounds: int | None = None
    increments: tuple[tuple[int, int], ...] = DEFAULT_INCREMENTS


@dataclass(frozen=True)
class BroadcastConfig:
    backend: str = "local"
    debounce_ms: int = 150
    options: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ServerConfig:
    listen: Mapping[str, Any]
    auction: AuctionConfig
    broadcast: BroadcastConfig


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    return yaml.safe_load(path.read_text()) or {}


def parse_increments(raw: Any) -> tuple[tuple[int, int], ...]:
    """Normalise increment rules into ``(threshold, increment)`` pairs sorted by threshold."""
    if not raw:
        return DEFAULT_INCREMENTS
    rules = []
    for rule in raw:
        if isinstance(rule, Mapping):
            threshold, increment = rule.get("threshold"), rule.get("increment")
        else:
            threshold, increment = rule
        threshold, increment = int(threshold), int(increment)
        if threshold < 0 or increment <= 0:
            raise ValueError(f"invalid increment rule threshold={threshold} increment={increment}")
        rules.append((threshold, increment))
    return tuple(sorted(rules))


def build_server_config(data: Mapping[str, Any]) -> ServerConfig:
    auction = data.get("auction", {}) or {}
    broadcast = data.get("broadcast", {}) or {}
    backend = str(broadcast.get("backend", "local"))
    max_rounds = auction.get("max_rounds")
    return ServerConfig(
        listen=data.get("listen", {}) or {},
        auction=AuctionConfig(
            timer_seconds=int(auction.get("timer_seconds", 180)),
            tick_seconds=float(auction.get("tick_seconds", 1)),
            sale_display_seconds=float(auction.get("sale_display_seconds", 5)),
            unsold_resume_seconds=float(auction.get("unsold_resume_seconds", 0.8)),
            max_rounds=int(max_rounds) if max_rounds is not None else None,
            increments=parse_increments(auction.get("increments")),
        ),
        broadcast=BroadcastConfig(
            backend=backend,
            debounce_ms=int(broadcast.get("debounce_ms", 150)),
            options=dict(broadcast.get(backend) or {}),
        ),
    )


@lru_cache(maxsize=1)
def get_server_config() -> ServerConfig:
    path = Path(os.getenv("AUCTION_CONFIG_PATH", _DEFAULT_SERVER_CONFIG))
    return build_server_config(_load_yaml(path))


def get_catalog_path() -> Path:
    return Path(os.getenv("AUCTION_CATALOG_PATH", _DEFAULT_CATALOG))
