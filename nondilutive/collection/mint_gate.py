from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from nondilutive.common.logging import log_event

from .errors import InsufficientPayment, InvalidArgument, MintClosed, SupplyExceeded
from .focus import FocusStateMachine
from .ledger import OwnershipLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintDecision:
    to: str
    quantity: int
    payment: int


class MintGate:
    """
    Public mint switch plus per-unit payment and supply checks.

    New tokens are created in the ownership ledger and seeded at generation 0.
    """

    def __init__(
        self,
        *,
        ledger: OwnershipLedger,
        focus: FocusStateMachine,
        cost: int,
        max_supply: int,
        mint_open: bool = False,
    ) -> None:
        if cost < 0:
            raise ValueError("cost must be >= 0")
        if max_supply < 1:
            raise ValueError("max_supply must be >= 1")
        self._ledger = ledger
        self._focus = focus
        self._cost = int(cost)
        self._max_supply = int(max_supply)
        self._mint_open = bool(mint_open)

    @property
    def cost(self) -> int:
        return self._cost

    @property
    def max_supply(self) -> int:
        return self._max_supply

    @property
    def mint_open(self) -> bool:
        return self._mint_open

    def toggle(self) -> bool:
        self._mint_open = not self._mint_open
        log_event(logger, "collection.mint_toggled", mint_open=self._mint_open)
        return self._mint_open

    def check(self, *, to: str, quantity: int, value: int) -> MintDecision:
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise InvalidArgument(f"quantity must be a positive integer, got {quantity!r}")
        if value < 0:
            raise InvalidArgument("attached value must be >= 0")
        if not self._mint_open:
            raise MintClosed("public mint is closed")
        required = quantity * self._cost
        if value != required:
            raise InsufficientPayment(f"mint of {quantity} requires exactly {required}, got {value}")
        supply = self._ledger.total_supply()
        if supply + quantity > self._max_supply:
            raise SupplyExceeded(f"minting {quantity} would exceed max supply {self._max_supply} (supply={supply})")
        return MintDecision(to=str(to), quantity=quantity, payment=int(value))

    def commit(self, decision: MintDecision) -> list[int]:
        token_ids = self._ledger.mint(decision.to, decision.quantity)
        self._focus.seed(token_ids)
        log_event(
            logger,
            "collection.minted",
            to=decision.to,
            quantity=decision.quantity,
            token_ids=token_ids,
            total_supply=self._ledger.total_supply(),
        )
        return token_ids

    def reserve(self, *, to: str) -> list[int]:
        """Mint the reserved token 0 to the administrator; bypasses the public gate."""
        if self._ledger.total_supply() != 0:
            raise RuntimeError("reserved token can only be minted into an empty ledger")
        return self.commit(MintDecision(to=to, quantity=1, payment=0))

    def to_dict(self) -> dict[str, Any]:
        return {"mint_open": self._mint_open, "cost": self._cost, "max_supply": self._max_supply}
