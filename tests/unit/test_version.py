from __future__ import annotations

import json
from pathlib import Path

import dynaquery


def test_version_matches_version_json() -> None:
    version_file = Path(__file__).resolve().parents[2] / "src" / "dynaquery" / "version.json"
    data = json.loads(version_file.read_text(encoding="utf-8"))
    assert dynaquery.__repo_version__ == data["version"]
    if "-rc." in data["version"]:
        assert "-rc." not in dynaquery.__version__
        assert "rc" in dynaquery.__version__
    else:
        assert dynaquery.__version__ == data["version"]
