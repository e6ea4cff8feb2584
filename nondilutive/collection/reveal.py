"""
Progressive reveal.

A generation's reveal is a write-once threshold: token ids below it render the
generation's real metadata, everything else renders the collection placeholder.
Rank is the token's global mint-order id, which is stable across focus changes.
"""

from __future__ import annotations

from .generations import GenerationRegistry, RevealState


def token_rank(token_id: int) -> int:
    return int(token_id)


def is_revealed_state(reveal: RevealState, token_id: int) -> bool:
    return reveal.is_set and token_rank(token_id) < reveal.threshold


def is_revealed(registry: GenerationRegistry, generation_id: int, token_id: int) -> bool:
    return is_revealed_state(registry.get(generation_id).reveal, token_id)
