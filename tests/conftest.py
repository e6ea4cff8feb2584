from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolate_collection_env(monkeypatch) -> None:
    """Keep operator env (catalog dir, flag policy) from leaking into tests."""
    for name in ("GENERATION_CATALOG_DIR", "GENERATION_FLAG_POLICY", "COLLECTION_MINT_OPEN"):
        monkeypatch.delenv(name, raising=False)
