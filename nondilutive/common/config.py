"""
Collection configuration (environment-driven, read at call time).

No state is read at import time; call `load_collection_settings()` where the
collection is constructed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

TRUTHY = {"1", "true", "t", "yes", "y", "on"}
FALSY = {"0", "false", "f", "no", "n", "off"}

DEFAULT_NAME = "Non-Dilutive"
DEFAULT_SYMBOL = "No-D"
DEFAULT_UNREVEALED_URI = "ipfs://unrevealed/"
DEFAULT_GENERATION_ZERO_URI = "ipfs://generation-zero/"
DEFAULT_MAX_SUPPLY = 900
# 0.02 in 18-decimal smallest units.
DEFAULT_MINT_COST = 20_000_000_000_000_000
DEFAULT_ADMIN = "admin"


class GenerationFlagPolicy(str, Enum):
    """
    How the `toggleable` load flag is interpreted.

    TOGGLE_GATE: generations loaded with toggleable=False reject toggle_generation.
    OPAQUE: the flag is stored and reported but has no effect.
    """

    TOGGLE_GATE = "toggle_gate"
    OPAQUE = "opaque"


def _env_str(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw if raw else default


def _parse_bool_env(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in TRUTHY:
        return True
    if raw in FALSY:
        return False
    return default


def _parse_int_env(name: str, default: int, *, minimum: int = 0) -> int:
    """
    Integer env var. Invalid or below `minimum` is a configuration error.
    """
    raw = (os.getenv(name) or "").replace("_", "").strip()
    if not raw:
        return int(default)
    try:
        v = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if v < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {v}")
    return v


def _parse_flag_policy(raw: str | None) -> GenerationFlagPolicy:
    s = (raw or "").strip().lower()
    if not s:
        return GenerationFlagPolicy.TOGGLE_GATE
    try:
        return GenerationFlagPolicy(s)
    except ValueError as e:
        allowed = ", ".join(p.value for p in GenerationFlagPolicy)
        raise ValueError(f"GENERATION_FLAG_POLICY must be one of: {allowed}") from e


@dataclass(frozen=True)
class CollectionSettings:
    name: str = DEFAULT_NAME
    symbol: str = DEFAULT_SYMBOL
    unrevealed_uri: str = DEFAULT_UNREVEALED_URI
    generation_zero_uri: str = DEFAULT_GENERATION_ZERO_URI
    max_supply: int = DEFAULT_MAX_SUPPLY
    mint_cost: int = DEFAULT_MINT_COST
    admin: str = DEFAULT_ADMIN
    mint_open: bool = False
    flag_policy: GenerationFlagPolicy = GenerationFlagPolicy.TOGGLE_GATE
    catalog_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.max_supply < 1:
            raise ValueError("max_supply must be >= 1 (token 0 is reserved for the administrator)")
        if self.mint_cost < 0:
            raise ValueError("mint_cost must be >= 0")
        if not str(self.admin or "").strip():
            raise ValueError("admin is required")


def load_collection_settings() -> CollectionSettings:
    """
    Env:
      COLLECTION_NAME, COLLECTION_SYMBOL, COLLECTION_UNREVEALED_URI,
      COLLECTION_GENERATION_ZERO_URI, COLLECTION_MAX_SUPPLY, COLLECTION_MINT_COST,
      COLLECTION_ADMIN, COLLECTION_MINT_OPEN, GENERATION_FLAG_POLICY,
      GENERATION_CATALOG_DIR
    """
    catalog_raw = (os.getenv("GENERATION_CATALOG_DIR") or "").strip()
    return CollectionSettings(
        name=_env_str("COLLECTION_NAME", DEFAULT_NAME),
        symbol=_env_str("COLLECTION_SYMBOL", DEFAULT_SYMBOL),
        unrevealed_uri=_env_str("COLLECTION_UNREVEALED_URI", DEFAULT_UNREVEALED_URI),
        generation_zero_uri=_env_str("COLLECTION_GENERATION_ZERO_URI", DEFAULT_GENERATION_ZERO_URI),
        max_supply=_parse_int_env("COLLECTION_MAX_SUPPLY", DEFAULT_MAX_SUPPLY, minimum=1),
        mint_cost=_parse_int_env("COLLECTION_MINT_COST", DEFAULT_MINT_COST),
        admin=_env_str("COLLECTION_ADMIN", DEFAULT_ADMIN),
        mint_open=_parse_bool_env("COLLECTION_MINT_OPEN", default=False),
        flag_policy=_parse_flag_policy(os.getenv("GENERATION_FLAG_POLICY")),
        catalog_dir=Path(catalog_raw) if catalog_raw else None,
    )
