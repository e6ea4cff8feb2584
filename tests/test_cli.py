from __future__ import annotations

import json
from pathlib import Path

from nondilutive.cli import main


def test_validate_catalog_prints_specs(capsys) -> None:
    repo_catalog = Path(__file__).resolve().parents[1] / "configs" / "generations"
    assert main(["validate-catalog", str(repo_catalog)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [row["generation_id"] for row in out] == [1, 2]


def test_validate_catalog_reports_invalid_files(tmp_path: Path, capsys) -> None:
    (tmp_path / "1.yaml").write_text("base_uri: ipfs://one/\nprice: 3\n", encoding="utf-8")
    assert main(["validate-catalog", str(tmp_path)]) == 2
    assert "invalid catalog" in capsys.readouterr().err


def test_validate_catalog_reports_malformed_yaml(tmp_path: Path, capsys) -> None:
    (tmp_path / "1.yaml").write_text("base_uri: [unclosed\n", encoding="utf-8")
    assert main(["validate-catalog", str(tmp_path)]) == 2
    assert "invalid YAML in 1.yaml" in capsys.readouterr().err
