"""
End-to-end collection walkthrough plus atomicity, re-entrancy, withdraw and
snapshot behavior.
"""

from __future__ import annotations

import logging

import pytest

from nondilutive.collection.contract import NonDilutiveCollection
from nondilutive.collection.errors import (
    GenerationAlreadyLoaded,
    GenerationNotDifferent,
    GenerationNotDowngradable,
    GenerationNotEnabled,
    GenerationNotToggleable,
    NotAdministrator,
    ReentrantCall,
    TokenNonExistent,
    TokenRevealed,
)
from tests.collection_helpers import ADMIN, COST, MINTER, PRICE, make_collection, state_bytes


def test_generational_walkthrough() -> None:
    c = make_collection(mint_open=False)
    assert c.name == "Non-Dilutive"
    assert c.cost == COST

    c.toggle_mint(caller=ADMIN)
    assert c.mint_open is True
    c.mint(1, caller=MINTER, value=COST)
    c.mint(2, caller=MINTER, value=2 * COST)
    c.mint(10, caller=MINTER, value=10 * COST)
    assert c.total_supply() == 14

    assert "ipfs://unrevealed/" in c.token_uri(1)
    c.set_revealed(0, 500, caller=ADMIN)
    with pytest.raises(TokenRevealed):
        c.set_revealed(0, 200, caller=ADMIN)
    assert "ipfs://generation-zero/" in c.token_uri(1)
    assert c.get_token_generation(1) == 0
    with pytest.raises(TokenNonExistent):
        c.get_token_generation(100)
    with pytest.raises(GenerationNotDifferent):
        c.focus_generation(0, 1, caller=MINTER)

    c.load_generation(1, False, True, False, 0, 0, "ipfs://generation-one/", caller=ADMIN)
    with pytest.raises(GenerationAlreadyLoaded):
        c.load_generation(1, True, True, False, 0, 0, "ipfs://generation-one/", caller=ADMIN)
    with pytest.raises(GenerationNotEnabled):
        c.focus_generation(1, 1, caller=MINTER)

    c.toggle_generation(1, caller=ADMIN)
    with pytest.raises(GenerationNotToggleable):
        c.toggle_generation(1, caller=ADMIN)

    c.focus_generation(1, 1, caller=MINTER)
    assert "ipfs://unrevealed/" in c.token_uri(1)
    c.focus_generation(0, 1, caller=MINTER)
    assert "ipfs://generation-zero/" in c.token_uri(1)

    c.set_revealed(1, 500, caller=ADMIN)
    c.focus_generation(1, 1, caller=MINTER)
    assert "ipfs://generation-one/" in c.token_uri(1)

    c.load_generation(2, True, True, True, PRICE, 0, "ipfs://generation-two/", caller=ADMIN)
    c.set_revealed(2, 500, caller=ADMIN)
    c.focus_generation(2, 1, caller=MINTER, value=PRICE)
    assert "ipfs://generation-two/" in c.token_uri(1)

    with pytest.raises(GenerationNotDowngradable):
        c.focus_generation(1, 1, caller=MINTER)
    assert "ipfs://generation-two/" in c.token_uri(1)

    with pytest.raises(GenerationNotToggleable):
        c.toggle_generation(2, caller=ADMIN)

    assert c.withdraw(caller=ADMIN) == 13 * COST + PRICE
    assert c.treasury_balance == 0


def test_withdraw_is_admin_only() -> None:
    c = make_collection()
    c.mint(1, caller=MINTER, value=COST)
    with pytest.raises(NotAdministrator):
        c.withdraw(caller=MINTER)
    assert c.treasury_balance == COST
    assert c.withdraw(caller=ADMIN) == COST
    assert c.withdraw(caller=ADMIN) == 0


def test_rejected_calls_leave_state_unchanged() -> None:
    c = make_collection()
    c.mint(2, caller=MINTER, value=2 * COST)
    c.load_generation(1, False, True, False, 0, 0, "ipfs://generation-one/", caller=ADMIN)
    before = state_bytes(c)

    rejected = [
        lambda: c.mint(1, caller=MINTER, value=0),
        lambda: c.load_generation(1, True, False, True, 5, 5, "ipfs://x/", caller=ADMIN),
        lambda: c.focus_generation(1, 1, caller=MINTER),
        lambda: c.focus_generation(9, 1, caller=MINTER),
        lambda: c.toggle_generation(9, caller=ADMIN),
        lambda: c.toggle_mint(caller=MINTER),
        lambda: c.withdraw(caller=MINTER),
    ]
    for call in rejected:
        with pytest.raises(Exception):
            call()
        assert state_bytes(c) == before


def test_reentrant_call_during_mint_is_rejected(monkeypatch) -> None:
    c = make_collection()
    original_mint = c._ledger.mint
    seen: list[Exception] = []

    def _mint_with_callback(to: str, count: int) -> list[int]:
        try:
            c.toggle_mint(caller=ADMIN)
        except ReentrantCall as e:
            seen.append(e)
        # Reads stay available to callbacks.
        assert c.mint_open is True
        return original_mint(to, count)

    monkeypatch.setattr(c._ledger, "mint", _mint_with_callback)

    assert c.mint(1, caller=MINTER, value=COST) == [1]
    assert len(seen) == 1
    assert c.mint_open is True
    assert c.total_supply() == 2


def test_rejections_are_logged(caplog) -> None:
    c = make_collection()
    caplog.set_level(logging.INFO, logger="nondilutive")
    with pytest.raises(GenerationNotDifferent):
        c.focus_generation(0, 0, caller=ADMIN)

    rows = [r for r in caplog.records if getattr(r, "event_type", None) == "collection.call_rejected"]
    assert len(rows) == 1
    assert rows[0].levelno == logging.WARNING
    assert rows[0].error == "GenerationNotDifferent"
    assert rows[0].operation == "focus_generation"


def test_snapshot_round_trip_restores_behavior() -> None:
    c = make_collection()
    c.mint(2, caller=MINTER, value=2 * COST)
    c.load_generation(2, True, True, True, PRICE, 3, "ipfs://generation-two/", caller=ADMIN)
    c.set_revealed(2, 10, caller=ADMIN)
    c.focus_generation(2, 1, caller=MINTER, value=PRICE)

    restored = NonDilutiveCollection.from_snapshot(c.snapshot())

    assert state_bytes(restored) == state_bytes(c)
    assert restored.token_uri(1) == "ipfs://generation-two/1"
    assert restored.owner_of(2) == MINTER
    assert restored.treasury_balance == c.treasury_balance
    with pytest.raises(GenerationNotDowngradable):
        restored.focus_generation(0, 1, caller=MINTER)
    assert restored.mint(1, caller=MINTER, value=COST) == [3]


def test_snapshot_rejects_unknown_version() -> None:
    c = make_collection()
    snap = c.snapshot()
    snap["version"] = 99
    with pytest.raises(ValueError):
        NonDilutiveCollection.from_snapshot(snap)


def test_construction_logs_deployment_at_info(caplog) -> None:
    caplog.set_level(logging.INFO)
    c = make_collection()

    rows = [r for r in caplog.records if getattr(r, "event_type", None) == "collection.deployed"]
    assert len(rows) == 1
    assert rows[0].collection_name == c.name
    assert rows[0].reserved_token_ids == [0]
