"""
Base ownership ledger consumed by the collection core.

Only the reads/writes the core needs: owner lookup, existence, sequential mint,
and supply. Transfer/approval semantics live with whatever ledger backs a real
deployment; `OwnershipLedger` is the seam.
"""

from __future__ import annotations

from typing import Any, Protocol


class OwnershipLedger(Protocol):
    def owner_of(self, token_id: int) -> str: ...

    def exists(self, token_id: int) -> bool: ...

    def mint(self, to: str, count: int) -> list[int]: ...

    def total_supply(self) -> int: ...


class InMemoryOwnershipLedger:
    """
    Sequential-id owner mapping. Ids start at 0 and are never reused (no burn).
    """

    def __init__(self) -> None:
        self._owners: dict[int, str] = {}
        self._next_id: int = 0

    def owner_of(self, token_id: int) -> str:
        try:
            return self._owners[int(token_id)]
        except KeyError:
            raise KeyError(f"token_id not minted: {token_id}") from None

    def exists(self, token_id: int) -> bool:
        return int(token_id) in self._owners

    def mint(self, to: str, count: int) -> list[int]:
        owner = str(to or "").strip()
        if not owner:
            raise ValueError("mint recipient is required")
        if count <= 0:
            raise ValueError("count must be > 0")
        ids = list(range(self._next_id, self._next_id + int(count)))
        for token_id in ids:
            self._owners[token_id] = owner
        self._next_id += int(count)
        return ids

    def total_supply(self) -> int:
        return len(self._owners)

    def to_dict(self) -> dict[str, Any]:
        return {
            "next_id": self._next_id,
            "owners": {str(k): v for k, v in sorted(self._owners.items())},
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "InMemoryOwnershipLedger":
        ledger = cls()
        ledger._owners = {int(k): str(v) for k, v in (d.get("owners") or {}).items()}
        ledger._next_id = int(d.get("next_id") or (max(ledger._owners, default=-1) + 1))
        return ledger
