"""
Per-token focus state machine.

State per token:
  current_generation  the generation the token renders (0 at mint)
  downgrade_floor     highest downgrade-locked generation reached (None until one is)

Transitions are `focus_generation` calls. There is no terminal state; a token may
move among non-locked generations indefinitely. Once a downgrade-locked
generation is reached, the floor only rises.

Admission order (first failure wins):
  TokenNonExistent -> NotTokenOwner -> GenerationNotFound -> GenerationNotDifferent
  -> GenerationNotDowngradable -> InsufficientPayment | GenerationNotEnabled
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from .errors import (
    GenerationNotDifferent,
    GenerationNotDowngradable,
    GenerationNotEnabled,
    InsufficientPayment,
    InvalidArgument,
    NotTokenOwner,
    TokenNonExistent,
)
from .generations import GENERATION_ZERO, GenerationRegistry
from .ledger import OwnershipLedger

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class TokenFocus:
    current_generation: int = GENERATION_ZERO
    downgrade_floor: Optional[int] = None


@dataclass(frozen=True)
class FocusDecision:
    """Outcome of a passed admission check; consumed by `commit`."""

    token_id: int
    caller: str
    from_state: TokenFocus
    to_state: TokenFocus
    payment: int


@dataclass(frozen=True)
class FocusTransition:
    token_id: int
    caller: str
    from_generation: int
    to_generation: int
    downgrade_floor: Optional[int]
    payment: int
    at: datetime
    meta: dict[str, Any] = field(default_factory=dict)

    def to_log_event(self) -> dict[str, Any]:
        return {
            "token_id": self.token_id,
            "caller": self.caller,
            "from_generation": self.from_generation,
            "to_generation": self.to_generation,
            "downgrade_floor": self.downgrade_floor,
            "payment": self.payment,
            "at": self.at.isoformat(),
            "meta": self.meta,
        }


class FocusStateMachine:
    def __init__(
        self,
        *,
        ledger: OwnershipLedger,
        registry: GenerationRegistry,
        now_fn: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._ledger = ledger
        self._registry = registry
        self._now = now_fn
        self._tokens: dict[int, TokenFocus] = {}

    def seed(self, token_ids: Iterable[int]) -> None:
        """Initialize freshly minted tokens at generation 0."""
        for token_id in token_ids:
            self._tokens[int(token_id)] = TokenFocus()

    def state(self, token_id: int) -> TokenFocus:
        if not self._ledger.exists(token_id):
            raise TokenNonExistent(f"token {token_id} does not exist")
        return self._tokens.get(int(token_id), TokenFocus())

    def current_generation(self, token_id: int) -> int:
        return self.state(token_id).current_generation

    def check(self, *, caller: str, generation_id: int, token_id: int, value: int = 0) -> FocusDecision:
        if value < 0:
            raise InvalidArgument("attached value must be >= 0")
        current = self.state(token_id)
        if self._ledger.owner_of(token_id) != str(caller or "").strip():
            raise NotTokenOwner(f"caller does not own token {token_id}")

        target = self._registry.get(generation_id)
        if generation_id == current.current_generation:
            raise GenerationNotDifferent(f"token {token_id} is already focused on generation {generation_id}")

        if current.downgrade_floor is not None and generation_id < current.downgrade_floor:
            raise GenerationNotDowngradable(
                f"token {token_id} reached locked generation {current.downgrade_floor}; cannot focus {generation_id}"
            )

        d = target.definition
        if d.payable_upgrade:
            if value != d.price:
                raise InsufficientPayment(f"generation {generation_id} requires exactly {d.price}, got {value}")
        else:
            if not target.enabled:
                raise GenerationNotEnabled(f"generation {generation_id} is not enabled")
            if value != 0:
                raise InsufficientPayment(f"generation {generation_id} is not payable; got {value}")

        floor = current.downgrade_floor
        if d.downgrade_locked:
            floor = generation_id if floor is None else max(floor, generation_id)

        return FocusDecision(
            token_id=int(token_id),
            caller=str(caller),
            from_state=current,
            to_state=TokenFocus(current_generation=generation_id, downgrade_floor=floor),
            payment=int(value),
        )

    def commit(self, decision: FocusDecision) -> FocusTransition:
        self._tokens[decision.token_id] = decision.to_state
        t = FocusTransition(
            token_id=decision.token_id,
            caller=decision.caller,
            from_generation=decision.from_state.current_generation,
            to_generation=decision.to_state.current_generation,
            downgrade_floor=decision.to_state.downgrade_floor,
            payment=decision.payment,
            at=self._now(),
        )
        logger.info(
            "collection.focus_transition %s",
            json.dumps(t.to_log_event(), separators=(",", ":")),
            extra={"event_type": "collection.focus_transition"},
        )
        return t

    def to_dict(self) -> dict[str, Any]:
        return {
            str(k): {"current_generation": v.current_generation, "downgrade_floor": v.downgrade_floor}
            for k, v in sorted(self._tokens.items())
        }

    def restore(self, d: dict[str, Any]) -> None:
        self._tokens = {
            int(k): TokenFocus(
                current_generation=int(v.get("current_generation") or 0),
                downgrade_floor=None if v.get("downgrade_floor") is None else int(v["downgrade_floor"]),
            )
            for k, v in d.items()
        }
