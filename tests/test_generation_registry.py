from __future__ import annotations

import pytest

from nondilutive.collection.errors import (
    GenerationAlreadyLoaded,
    GenerationNotFound,
    GenerationNotToggleable,
    InvalidArgument,
    NotAdministrator,
    TokenRevealed,
)
from nondilutive.collection.generations import GenerationDefinition, GenerationRegistry
from nondilutive.common.config import GenerationFlagPolicy
from tests.collection_helpers import ADMIN, MINTER, PRICE, make_collection, state_bytes


def _load_free(c, generation_id: int = 1, *, toggleable: bool = True, locked: bool = False):
    return c.load_generation(
        generation_id, locked, toggleable, False, 0, 0, f"ipfs://generation-{generation_id}/", caller=ADMIN
    )


def _load_paid(c, generation_id: int = 2, *, locked: bool = True):
    return c.load_generation(
        generation_id, locked, True, True, PRICE, 0, f"ipfs://generation-{generation_id}/", caller=ADMIN
    )


def test_generation_zero_is_built_in() -> None:
    c = make_collection()
    g0 = c.generation(0)
    assert g0.enabled is True
    assert g0.definition.downgrade_locked is False
    assert g0.definition.payable_upgrade is False
    assert g0.definition.base_uri == "ipfs://generation-zero/"
    assert [g.generation_id for g in c.generations()] == [0]


def test_generation_zero_cannot_be_toggled_or_reloaded() -> None:
    c = make_collection(flag_policy=GenerationFlagPolicy.OPAQUE)
    with pytest.raises(GenerationNotToggleable):
        c.toggle_generation(0, caller=ADMIN)
    with pytest.raises(GenerationAlreadyLoaded):
        _load_free(c, 0)
    assert c.generation(0).enabled is True


def test_loaded_generation_starts_disabled_unless_payable() -> None:
    c = make_collection()
    free = _load_free(c, 1)
    paid = _load_paid(c, 2)
    assert free.enabled is False
    assert free.toggle.consumed is False
    assert free.reveal.is_set is False
    assert paid.enabled is True
    assert paid.definition.price == PRICE
    assert [g.generation_id for g in c.generations()] == [0, 1, 2]


def test_reload_is_rejected_regardless_of_parameters() -> None:
    c = make_collection()
    _load_free(c, 1)
    before = state_bytes(c)

    with pytest.raises(GenerationAlreadyLoaded):
        c.load_generation(1, True, True, False, 0, 0, "ipfs://generation-one/", caller=ADMIN)
    with pytest.raises(GenerationAlreadyLoaded):
        c.load_generation(1, False, False, True, PRICE, 7, "ipfs://other/", caller=ADMIN)

    assert state_bytes(c) == before


def test_sparse_generation_ids_are_allowed() -> None:
    c = make_collection()
    _load_free(c, 7)
    _load_free(c, 3)
    assert [g.generation_id for g in c.generations()] == [0, 3, 7]


def test_load_generation_is_admin_only() -> None:
    c = make_collection()
    with pytest.raises(NotAdministrator):
        c.load_generation(1, False, True, False, 0, 0, "ipfs://generation-one/", caller=MINTER)
    with pytest.raises(GenerationNotFound):
        c.generation(1)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"generation_id": -1, "base_uri": "ipfs://x/"},
        {"generation_id": 1, "base_uri": ""},
        {"generation_id": 1, "base_uri": "ipfs://x/", "price": -1},
        {"generation_id": 1, "base_uri": "ipfs://x/", "capacity": -5},
    ],
)
def test_invalid_definitions_are_rejected(kwargs) -> None:
    with pytest.raises(InvalidArgument):
        GenerationDefinition(**kwargs)


def test_toggle_is_consumed_exactly_once() -> None:
    c = make_collection()
    _load_free(c, 1)

    assert c.toggle_generation(1, caller=ADMIN) is True
    assert c.generation(1).toggle.consumed is True

    with pytest.raises(GenerationNotToggleable):
        c.toggle_generation(1, caller=ADMIN)
    assert c.generation(1).enabled is True


def test_toggle_unknown_generation() -> None:
    c = make_collection()
    with pytest.raises(GenerationNotFound):
        c.toggle_generation(42, caller=ADMIN)


def test_toggle_is_admin_only() -> None:
    c = make_collection()
    _load_free(c, 1)
    with pytest.raises(NotAdministrator):
        c.toggle_generation(1, caller=MINTER)
    assert c.generation(1).toggle.consumed is False


def test_payable_generation_is_never_toggleable() -> None:
    c = make_collection()
    _load_paid(c, 2)
    with pytest.raises(GenerationNotToggleable):
        c.toggle_generation(2, caller=ADMIN)
    assert c.generation(2).toggle.consumed is False


def test_toggleable_flag_gates_toggle_under_default_policy() -> None:
    c = make_collection()
    _load_free(c, 1, toggleable=False)
    with pytest.raises(GenerationNotToggleable):
        c.toggle_generation(1, caller=ADMIN)


def test_toggleable_flag_is_opaque_under_opaque_policy() -> None:
    c = make_collection(flag_policy=GenerationFlagPolicy.OPAQUE)
    view = _load_free(c, 1, toggleable=False)
    assert view.definition.toggleable is False
    assert c.toggle_generation(1, caller=ADMIN) is True


def test_set_revealed_is_write_once() -> None:
    c = make_collection()
    state = c.set_revealed(0, 500, caller=ADMIN)
    assert state.threshold == 500
    assert state.is_set is True

    for count in (200, 500, 0, 10_000):
        with pytest.raises(TokenRevealed):
            c.set_revealed(0, count, caller=ADMIN)
    assert c.generation(0).reveal.threshold == 500


def test_set_revealed_unknown_generation_and_admin_only() -> None:
    c = make_collection()
    with pytest.raises(GenerationNotFound):
        c.set_revealed(3, 10, caller=ADMIN)
    with pytest.raises(NotAdministrator):
        c.set_revealed(0, 10, caller=MINTER)
    assert c.generation(0).reveal.is_set is False


def test_set_revealed_rejects_negative_count() -> None:
    c = make_collection()
    with pytest.raises(InvalidArgument):
        c.set_revealed(0, -1, caller=ADMIN)
    assert c.generation(0).reveal.is_set is False


def test_registry_snapshot_restores_toggle_and_reveal_records() -> None:
    reg = GenerationRegistry(generation_zero_uri="ipfs://zero/")
    reg.load(GenerationDefinition(generation_id=1, base_uri="ipfs://one/", toggleable=True))
    reg.toggle(1)
    reg.set_revealed(1, 25)

    restored = GenerationRegistry.from_dict(reg.to_dict())
    assert restored.to_dict() == reg.to_dict()
    with pytest.raises(GenerationNotToggleable):
        restored.toggle(1)
    with pytest.raises(TokenRevealed):
        restored.set_revealed(1, 1)


@pytest.mark.parametrize(
    "price,capacity,base_uri",
    [(0, 0, ""), (-1, 0, "ipfs://generation-one/"), (0, -5, "ipfs://generation-one/")],
)
def test_reload_with_invalid_parameters_still_reports_already_loaded(price: int, capacity: int, base_uri: str) -> None:
    c = make_collection()
    _load_free(c, 1)
    before = state_bytes(c)
    with pytest.raises(GenerationAlreadyLoaded):
        c.load_generation(1, False, True, False, price, capacity, base_uri, caller=ADMIN)
    assert state_bytes(c) == before
