from __future__ import annotations

import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from nondilutive.collection.contract import NonDilutiveCollection
from nondilutive.collection.generations import GenerationView

from .models import GenerationSpec

logger = logging.getLogger(__name__)


def _utc_ts() -> str:
    return datetime.now(timezone.utc).isoformat()


def _repo_root() -> Path:
    # <root>/nondilutive/catalog/loader.py -> parents[2] == <root>
    return Path(__file__).resolve().parents[2]


def get_catalog_dir(raw: str | os.PathLike[str] | None = None) -> Optional[Path]:
    raw = raw if raw is not None else (os.getenv("GENERATION_CATALOG_DIR") or "").strip()
    if not raw:
        return None
    p = Path(raw)
    if not p.is_absolute() and not p.exists():
        p = _repo_root() / p
    return p


def _iter_catalog_files(catalog_dir: Path) -> list[Path]:
    if not catalog_dir.exists():
        return []
    out: list[Path] = []
    for p in sorted(catalog_dir.iterdir()):
        if not p.is_file() or p.name.startswith("."):
            continue
        if p.suffix.lower() in {".yaml", ".yml", ".json"}:
            out.append(p)
    return out


def _read_catalog_file(p: Path) -> dict[str, Any]:
    raw = p.read_text(encoding="utf-8")
    if p.suffix.lower() == ".json":
        return json.loads(raw) if raw.strip() else {}
    try:
        return yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML in {p.name}: {e}") from e


def catalog_hash(files: list[Path]) -> str:
    """Stable hash over file names and raw bytes."""
    h = hashlib.sha256()
    for p in files:
        h.update(p.name.encode("utf-8"))
        h.update(b"\n")
        h.update(p.read_bytes())
        h.update(b"\n---\n")
    return h.hexdigest()


def load_catalog(catalog_dir: str | os.PathLike[str] | None = None) -> list[GenerationSpec]:
    """
    Load and validate every generation file in the catalog directory, ordered by id.

    Raises on:
    - invalid files
    - duplicate generation_id
    """
    d = get_catalog_dir(catalog_dir)
    if d is None:
        return []
    files = _iter_catalog_files(d)

    seen: dict[int, Path] = {}
    out: list[GenerationSpec] = []
    for p in files:
        row = _read_catalog_file(p) or {}
        if not isinstance(row, dict):
            raise ValueError(f"catalog file must be a mapping: {p}")
        # A purely numeric file stem names the generation (e.g. 2.yaml).
        if "generation_id" not in row and p.stem.isdigit():
            row["generation_id"] = int(p.stem)

        spec = GenerationSpec.model_validate(row)
        if spec.generation_id in seen:
            raise ValueError(f"duplicate generation_id {spec.generation_id}: {seen[spec.generation_id].name}, {p.name}")
        seen[spec.generation_id] = p
        out.append(spec)

    out.sort(key=lambda s: s.generation_id)
    logger.info(
        "intent %s",
        json.dumps(
            {
                "intent_type": "generation_catalog_loaded",
                "ts": _utc_ts(),
                "catalog_dir": str(d),
                "hash": catalog_hash(files),
                "generation_ids": [s.generation_id for s in out],
            },
            separators=(",", ":"),
        ),
    )
    return out


def apply_catalog(
    collection: NonDilutiveCollection,
    specs: list[GenerationSpec],
    *,
    caller: str,
) -> list[GenerationView]:
    """
    Load every spec into the collection (all or nothing), then apply declared reveals.
    """
    if not specs:
        return []
    collection.load_generations([s.to_definition() for s in specs], caller=caller)
    for s in specs:
        if s.reveal_count is not None:
            collection.set_revealed(s.generation_id, s.reveal_count, caller=caller)
    return [collection.generation(s.generation_id) for s in specs]
