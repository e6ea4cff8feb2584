"""
NonDilutiveCollection: the public surface of the collection core.

Every operation runs as one atomic call:
- a re-entrant lock is held for the whole call (threads are serialized)
- a state-changing call started while another call is executing on the same
  thread is rejected with ReentrantCall
- all admission checks run against live state inside the call; writes happen
  only after every check passed, and the attached payment is accepted last

A rejected call raises a `CollectionError` subclass and leaves state unchanged.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional

from nondilutive.common.config import CollectionSettings, GenerationFlagPolicy
from nondilutive.common.logging import log_event

from .access import AccessControl
from .errors import CollectionError, GenerationAlreadyLoaded, ReentrantCall
from .focus import FocusStateMachine, FocusTransition
from .generations import GenerationDefinition, GenerationRegistry, GenerationView, RevealState
from .ledger import InMemoryOwnershipLedger
from .metadata import MetadataResolver
from .mint_gate import MintGate
from .reveal import is_revealed
from .treasury import Treasury

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NonDilutiveCollection:
    def __init__(self, settings: CollectionSettings | None = None, *, now_fn: Callable[[], datetime] = _utc_now) -> None:
        settings = settings or CollectionSettings()
        self._wire(
            name=settings.name,
            symbol=settings.symbol,
            admin=settings.admin,
            unrevealed_uri=settings.unrevealed_uri,
            ledger=InMemoryOwnershipLedger(),
            registry=GenerationRegistry(
                generation_zero_uri=settings.generation_zero_uri,
                flag_policy=settings.flag_policy,
            ),
            treasury=Treasury(),
            cost=settings.mint_cost,
            max_supply=settings.max_supply,
            mint_open=settings.mint_open,
            now_fn=now_fn,
        )
        reserved = self._mint_gate.reserve(to=self._access.admin)
        log_event(
            logger,
            "collection.deployed",
            collection_name=self._name,
            symbol=self._symbol,
            admin=self._access.admin,
            reserved_token_ids=reserved,
            max_supply=self._mint_gate.max_supply,
            cost=self._mint_gate.cost,
        )

    def _wire(
        self,
        *,
        name: str,
        symbol: str,
        admin: str,
        unrevealed_uri: str,
        ledger: InMemoryOwnershipLedger,
        registry: GenerationRegistry,
        treasury: Treasury,
        cost: int,
        max_supply: int,
        mint_open: bool,
        now_fn: Callable[[], datetime],
    ) -> None:
        self._name = str(name)
        self._symbol = str(symbol)
        self._access = AccessControl(admin=admin)
        self._ledger = ledger
        self._registry = registry
        self._treasury = treasury
        self._focus = FocusStateMachine(ledger=ledger, registry=registry, now_fn=now_fn)
        self._mint_gate = MintGate(
            ledger=ledger,
            focus=self._focus,
            cost=cost,
            max_supply=max_supply,
            mint_open=mint_open,
        )
        self._resolver = MetadataResolver(registry=registry, focus=self._focus, unrevealed_uri=unrevealed_uri)
        self._lock = threading.RLock()
        self._depth = 0

    @contextmanager
    def _call(self, operation: str, *, caller: Optional[str] = None, read_only: bool = False) -> Iterator[None]:
        with self._lock:
            if self._depth > 0 and not read_only:
                raise ReentrantCall(f"{operation} called while another call is executing")
            self._depth += 1
            try:
                yield
            except CollectionError as e:
                log_event(
                    logger,
                    "collection.call_rejected",
                    severity="WARNING",
                    operation=operation,
                    caller=caller,
                    error=e.code,
                    kind=e.kind,
                    detail=e.message,
                )
                raise
            finally:
                self._depth -= 1

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def admin(self) -> str:
        return self._access.admin

    @property
    def cost(self) -> int:
        return self._mint_gate.cost

    @property
    def max_supply(self) -> int:
        return self._mint_gate.max_supply

    @property
    def mint_open(self) -> bool:
        return self._mint_gate.mint_open

    @property
    def unrevealed_uri(self) -> str:
        return self._resolver.unrevealed_uri

    @property
    def flag_policy(self) -> GenerationFlagPolicy:
        return self._registry.flag_policy

    @property
    def treasury_balance(self) -> int:
        return self._treasury.balance

    def total_supply(self) -> int:
        with self._call("total_supply", read_only=True):
            return self._ledger.total_supply()

    def exists(self, token_id: int) -> bool:
        with self._call("exists", read_only=True):
            return self._ledger.exists(token_id)

    def owner_of(self, token_id: int) -> str:
        with self._call("owner_of", read_only=True):
            self._focus.state(token_id)
            return self._ledger.owner_of(token_id)

    def generation(self, generation_id: int) -> GenerationView:
        with self._call("generation", read_only=True):
            return self._registry.get(generation_id)

    def generations(self) -> list[GenerationView]:
        with self._call("generations", read_only=True):
            return [self._registry.get(gid) for gid in self._registry.ids()]

    def is_revealed(self, generation_id: int, token_id: int) -> bool:
        with self._call("is_revealed", read_only=True):
            return is_revealed(self._registry, generation_id, token_id)

    def token_uri(self, token_id: int) -> str:
        with self._call("token_uri", read_only=True):
            return self._resolver.token_uri(token_id)

    def get_token_generation(self, token_id: int) -> int:
        with self._call("get_token_generation", read_only=True):
            return self._resolver.token_generation(token_id)

    # ------------------------------------------------------------------
    # Mint gate
    # ------------------------------------------------------------------

    def toggle_mint(self, *, caller: str) -> bool:
        with self._call("toggle_mint", caller=caller):
            self._access.require_admin(caller, operation="toggle_mint")
            return self._mint_gate.toggle()

    def mint(self, quantity: int, *, caller: str, value: int = 0) -> list[int]:
        with self._call("mint", caller=caller):
            decision = self._mint_gate.check(to=caller, quantity=quantity, value=value)
            token_ids = self._mint_gate.commit(decision)
            self._treasury.accept(payer=caller, amount=decision.payment, reason="mint")
            return token_ids

    # ------------------------------------------------------------------
    # Generation registry
    # ------------------------------------------------------------------

    def load_generation(
        self,
        generation_id: int,
        downgrade_locked: bool,
        toggleable: bool,
        payable_upgrade: bool,
        price: int,
        capacity: int,
        base_uri: str,
        *,
        caller: str,
    ) -> GenerationView:
        with self._call("load_generation", caller=caller):
            self._access.require_admin(caller, operation="load_generation")
            # A retry fails on the id alone, whatever the other parameters are.
            if self._registry.exists(generation_id):
                raise GenerationAlreadyLoaded(f"generation {generation_id} is already loaded")
            definition = GenerationDefinition(
                generation_id=generation_id,
                base_uri=base_uri,
                downgrade_locked=bool(downgrade_locked),
                toggleable=bool(toggleable),
                payable_upgrade=bool(payable_upgrade),
                price=int(price),
                capacity=int(capacity),
            )
            return self._registry.load(definition)

    def load_generations(self, definitions: list[GenerationDefinition], *, caller: str) -> list[GenerationView]:
        """
        Load several definitions as one call: either all load or none do.
        """
        with self._call("load_generations", caller=caller):
            self._access.require_admin(caller, operation="load_generations")
            seen: set[int] = set()
            for d in definitions:
                if self._registry.exists(d.generation_id) or d.generation_id in seen:
                    raise GenerationAlreadyLoaded(f"generation {d.generation_id} is already loaded")
                seen.add(d.generation_id)
            return [self._registry.load(d) for d in definitions]

    def toggle_generation(self, generation_id: int, *, caller: str) -> bool:
        with self._call("toggle_generation", caller=caller):
            self._access.require_admin(caller, operation="toggle_generation")
            return self._registry.toggle(generation_id).enabled

    def set_revealed(self, generation_id: int, count: int, *, caller: str) -> RevealState:
        with self._call("set_revealed", caller=caller):
            self._access.require_admin(caller, operation="set_revealed")
            return self._registry.set_revealed(generation_id, count)

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def focus_generation(self, generation_id: int, token_id: int, *, caller: str, value: int = 0) -> FocusTransition:
        with self._call("focus_generation", caller=caller):
            decision = self._focus.check(caller=caller, generation_id=generation_id, token_id=token_id, value=value)
            transition = self._focus.commit(decision)
            if decision.payment:
                self._treasury.accept(payer=caller, amount=decision.payment, reason="focus")
            return transition

    # ------------------------------------------------------------------
    # Treasury
    # ------------------------------------------------------------------

    def withdraw(self, *, caller: str) -> int:
        with self._call("withdraw", caller=caller):
            self._access.require_admin(caller, operation="withdraw")
            return self._treasury.withdraw(to=self._access.admin)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe copy of all persisted state."""
        with self._call("snapshot", read_only=True):
            return {
                "version": SNAPSHOT_VERSION,
                "collection": {
                    "name": self._name,
                    "symbol": self._symbol,
                    "admin": self._access.admin,
                    "unrevealed_uri": self._resolver.unrevealed_uri,
                    "flag_policy": self._registry.flag_policy.value,
                },
                "mint": self._mint_gate.to_dict(),
                "ledger": self._ledger.to_dict(),
                "generations": self._registry.to_dict(),
                "tokens": self._focus.to_dict(),
                "treasury": self._treasury.to_dict(),
            }

    @classmethod
    def from_snapshot(cls, d: dict[str, Any], *, now_fn: Callable[[], datetime] = _utc_now) -> "NonDilutiveCollection":
        if int(d.get("version") or 0) != SNAPSHOT_VERSION:
            raise ValueError(f"unsupported snapshot version: {d.get('version')!r}")
        meta = d["collection"]
        mint = d["mint"]
        policy = GenerationFlagPolicy(meta.get("flag_policy") or GenerationFlagPolicy.TOGGLE_GATE.value)
        treasury = d.get("treasury") or {}

        obj = cls.__new__(cls)
        obj._wire(
            name=meta["name"],
            symbol=meta["symbol"],
            admin=meta["admin"],
            unrevealed_uri=meta["unrevealed_uri"],
            ledger=InMemoryOwnershipLedger.from_dict(d["ledger"]),
            registry=GenerationRegistry.from_dict(d["generations"], flag_policy=policy),
            treasury=Treasury(
                balance=int(treasury.get("balance") or 0),
                total_received=int(treasury.get("total_received") or 0),
            ),
            cost=int(mint["cost"]),
            max_supply=int(mint["max_supply"]),
            mint_open=bool(mint["mint_open"]),
            now_fn=now_fn,
        )
        obj._focus.restore(d.get("tokens") or {})
        return obj
