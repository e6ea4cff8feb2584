"""
Metadata resolver (read-only).

  unrevealed -> collection-wide placeholder URI
  revealed   -> generation base URI + token id
"""

from __future__ import annotations

from .focus import FocusStateMachine
from .generations import GenerationRegistry
from .reveal import is_revealed_state


def token_identifier(token_id: int) -> str:
    return str(int(token_id))


class MetadataResolver:
    def __init__(self, *, registry: GenerationRegistry, focus: FocusStateMachine, unrevealed_uri: str) -> None:
        self._registry = registry
        self._focus = focus
        self._unrevealed_uri = str(unrevealed_uri)

    @property
    def unrevealed_uri(self) -> str:
        return self._unrevealed_uri

    def token_uri(self, token_id: int) -> str:
        generation = self._registry.get(self._focus.current_generation(token_id))
        if not is_revealed_state(generation.reveal, token_id):
            return self._unrevealed_uri
        return f"{generation.definition.base_uri}{token_identifier(token_id)}"

    def token_generation(self, token_id: int) -> int:
        return self._focus.current_generation(token_id)
