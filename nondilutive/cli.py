#!/usr/bin/env python3
"""
Operator CLI.

Examples:
  python -m nondilutive.cli validate-catalog configs/generations
  python -m nondilutive.cli serve --port 8080
"""

from __future__ import annotations

import argparse
import json
import os
import sys


def _validate_catalog(args: argparse.Namespace) -> int:
    from nondilutive.catalog.loader import load_catalog

    try:
        specs = load_catalog(args.catalog_dir)
    except ValueError as e:
        print(f"invalid catalog: {e}", file=sys.stderr)
        return 2
    print(json.dumps([s.model_dump() for s in specs], indent=2))
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("nondilutive.service.app:app", host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="nondilutive")
    sub = p.add_subparsers(dest="command", required=True)

    v = sub.add_parser("validate-catalog", help="Validate a generation catalog directory")
    v.add_argument("catalog_dir", help="Directory of generation YAML/JSON files")
    v.set_defaults(func=_validate_catalog)

    s = sub.add_parser("serve", help="Run the HTTP service")
    s.add_argument("--host", default="0.0.0.0")
    s.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    s.set_defaults(func=_serve)

    args = p.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
