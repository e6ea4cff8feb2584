"""
Generation registry: write-once catalog of generation definitions.

Each generation id maps to three records:
- `GenerationDefinition`: immutable after load (uri, payability, downgrade-lock, ...)
- `ToggleState`: one-shot administrative toggle `{enabled, consumed}`
- `RevealState`: write-once reveal threshold `{threshold, is_set}`

Definitions are insert-only; a second load of the same id is rejected no matter
what parameters it carries. Toggle and reveal records are replaced whole, never
edited field by field.

Generation 0 is created with the registry: permanently enabled, never
downgrade-locked, never payable, never toggleable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from nondilutive.common.config import GenerationFlagPolicy
from nondilutive.common.logging import log_event

from .errors import (
    GenerationAlreadyLoaded,
    GenerationNotFound,
    GenerationNotToggleable,
    InvalidArgument,
    TokenRevealed,
)

logger = logging.getLogger(__name__)

GENERATION_ZERO = 0


@dataclass(frozen=True, slots=True)
class GenerationDefinition:
    generation_id: int
    base_uri: str
    downgrade_locked: bool = False
    toggleable: bool = True
    payable_upgrade: bool = False
    price: int = 0
    # Reserved parameter; stored and reported, no behavioral effect.
    capacity: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.generation_id, int) or isinstance(self.generation_id, bool) or self.generation_id < 0:
            raise InvalidArgument(f"generation_id must be a non-negative integer, got {self.generation_id!r}")
        if not isinstance(self.base_uri, str) or not self.base_uri.strip():
            raise InvalidArgument("base_uri is required")
        if int(self.price) < 0:
            raise InvalidArgument("price must be >= 0")
        if int(self.capacity) < 0:
            raise InvalidArgument("capacity must be >= 0")


@dataclass(frozen=True, slots=True)
class ToggleState:
    enabled: bool
    consumed: bool = False


@dataclass(frozen=True, slots=True)
class RevealState:
    threshold: int = 0
    is_set: bool = False


@dataclass(frozen=True)
class GenerationView:
    """Read-only composite of a generation's three records."""

    definition: GenerationDefinition
    toggle: ToggleState
    reveal: RevealState

    @property
    def generation_id(self) -> int:
        return self.definition.generation_id

    @property
    def enabled(self) -> bool:
        return self.toggle.enabled

    def to_dict(self) -> dict[str, Any]:
        d = self.definition
        return {
            "generation_id": d.generation_id,
            "base_uri": d.base_uri,
            "downgrade_locked": d.downgrade_locked,
            "toggleable": d.toggleable,
            "payable_upgrade": d.payable_upgrade,
            "price": d.price,
            "capacity": d.capacity,
            "enabled": self.toggle.enabled,
            "toggled": self.toggle.consumed,
            "revealed_threshold": self.reveal.threshold,
            "reveal_set": self.reveal.is_set,
        }


class GenerationRegistry:
    def __init__(
        self,
        *,
        generation_zero_uri: str,
        flag_policy: GenerationFlagPolicy = GenerationFlagPolicy.TOGGLE_GATE,
    ) -> None:
        self._flag_policy = GenerationFlagPolicy(flag_policy)
        self._definitions: dict[int, GenerationDefinition] = {}
        self._toggles: dict[int, ToggleState] = {}
        self._reveals: dict[int, RevealState] = {}

        zero = GenerationDefinition(generation_id=GENERATION_ZERO, base_uri=generation_zero_uri, toggleable=False)
        self._definitions[GENERATION_ZERO] = zero
        self._toggles[GENERATION_ZERO] = ToggleState(enabled=True, consumed=True)
        self._reveals[GENERATION_ZERO] = RevealState()

    @property
    def flag_policy(self) -> GenerationFlagPolicy:
        return self._flag_policy

    def exists(self, generation_id: int) -> bool:
        return generation_id in self._definitions

    def ids(self) -> list[int]:
        return sorted(self._definitions)

    def get(self, generation_id: int) -> GenerationView:
        d = self._definitions.get(generation_id)
        if d is None:
            raise GenerationNotFound(f"generation {generation_id} is not loaded")
        return GenerationView(definition=d, toggle=self._toggles[generation_id], reveal=self._reveals[generation_id])

    def find(self, generation_id: int) -> Optional[GenerationView]:
        return self.get(generation_id) if self.exists(generation_id) else None

    def load(self, definition: GenerationDefinition) -> GenerationView:
        gid = definition.generation_id
        if gid in self._definitions:
            raise GenerationAlreadyLoaded(f"generation {gid} is already loaded")

        self._definitions[gid] = definition
        # Payable generations are gated by payment alone; the seed value is informational.
        self._toggles[gid] = ToggleState(enabled=bool(definition.payable_upgrade), consumed=False)
        self._reveals[gid] = RevealState()

        log_event(
            logger,
            "collection.generation_loaded",
            generation_id=gid,
            base_uri=definition.base_uri,
            downgrade_locked=definition.downgrade_locked,
            toggleable=definition.toggleable,
            payable_upgrade=definition.payable_upgrade,
            price=definition.price,
            capacity=definition.capacity,
        )
        return self.get(gid)

    def check_toggle(self, generation_id: int) -> ToggleState:
        """Raise if `toggle` would be rejected; return the current toggle record."""
        view = self.get(generation_id)
        if generation_id == GENERATION_ZERO:
            raise GenerationNotToggleable("generation 0 is permanently enabled")
        if view.definition.payable_upgrade:
            raise GenerationNotToggleable(f"generation {generation_id} is payable; it is gated by payment only")
        if view.toggle.consumed:
            raise GenerationNotToggleable(f"generation {generation_id} toggle was already used")
        if self._flag_policy == GenerationFlagPolicy.TOGGLE_GATE and not view.definition.toggleable:
            raise GenerationNotToggleable(f"generation {generation_id} was loaded as not toggleable")
        return view.toggle

    def toggle(self, generation_id: int) -> ToggleState:
        current = self.check_toggle(generation_id)
        new = ToggleState(enabled=not current.enabled, consumed=True)
        self._toggles[generation_id] = new
        log_event(
            logger,
            "collection.generation_toggled",
            generation_id=generation_id,
            enabled=new.enabled,
        )
        return new

    def set_revealed(self, generation_id: int, count: int) -> RevealState:
        view = self.get(generation_id)
        if view.reveal.is_set:
            raise TokenRevealed(f"generation {generation_id} reveal was already set")
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise InvalidArgument(f"reveal count must be a non-negative integer, got {count!r}")
        new = RevealState(threshold=count, is_set=True)
        self._reveals[generation_id] = new
        log_event(logger, "collection.generation_revealed", generation_id=generation_id, threshold=count)
        return new

    def to_dict(self) -> dict[str, Any]:
        return {str(gid): self.get(gid).to_dict() for gid in self.ids()}

    @classmethod
    def from_dict(
        cls,
        d: dict[str, Any],
        *,
        flag_policy: GenerationFlagPolicy = GenerationFlagPolicy.TOGGLE_GATE,
    ) -> "GenerationRegistry":
        rows = {int(k): v for k, v in d.items()}
        zero = rows.get(GENERATION_ZERO)
        if zero is None:
            raise ValueError("snapshot is missing generation 0")
        reg = cls(generation_zero_uri=str(zero["base_uri"]), flag_policy=flag_policy)
        for gid, row in sorted(rows.items()):
            if gid != GENERATION_ZERO:
                reg._definitions[gid] = GenerationDefinition(
                    generation_id=gid,
                    base_uri=str(row["base_uri"]),
                    downgrade_locked=bool(row.get("downgrade_locked")),
                    toggleable=bool(row.get("toggleable")),
                    payable_upgrade=bool(row.get("payable_upgrade")),
                    price=int(row.get("price") or 0),
                    capacity=int(row.get("capacity") or 0),
                )
                reg._toggles[gid] = ToggleState(enabled=bool(row.get("enabled")), consumed=bool(row.get("toggled")))
            reg._reveals[gid] = RevealState(
                threshold=int(row.get("revealed_threshold") or 0),
                is_set=bool(row.get("reveal_set")),
            )
        return reg
