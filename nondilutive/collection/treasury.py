from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from nondilutive.common.logging import log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentReceipt:
    payer: str
    amount: int
    reason: str  # "mint" | "focus"


class Treasury:
    """
    Retains payments attached to successful calls until the administrator withdraws.

    Amounts are integer smallest currency units. Callers only `accept` after every
    admission check has passed, so a rejected call never reaches the treasury.
    """

    def __init__(self, *, balance: int = 0, total_received: int = 0) -> None:
        if balance < 0 or total_received < 0:
            raise ValueError("treasury amounts must be >= 0")
        self._balance = int(balance)
        self._total_received = int(total_received)

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def total_received(self) -> int:
        return self._total_received

    def accept(self, *, payer: str, amount: int, reason: str) -> PaymentReceipt:
        if amount < 0:
            raise ValueError("payment amount must be >= 0")
        self._balance += int(amount)
        self._total_received += int(amount)
        return PaymentReceipt(payer=str(payer), amount=int(amount), reason=str(reason))

    def withdraw(self, *, to: str) -> int:
        amount = self._balance
        self._balance = 0
        log_event(logger, "collection.withdraw", to=str(to), amount=amount)
        return amount

    def to_dict(self) -> dict[str, Any]:
        return {"balance": self._balance, "total_received": self._total_received}
