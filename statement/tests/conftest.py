"""Put the statement dir on sys.path so tests import modules the way main.py does ('from models import')."""
import json
import os
import shutil
import sys
from pathlib import Path

import pytest

_statement_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _statement_dir not in sys.path:
    sys.path.insert(0, _statement_dir)

STATEMENT_DIR = Path(_statement_dir)


@pytest.fixture
def sample_data() -> dict:
    return json.loads((STATEMENT_DIR / "data.json").read_text(encoding="utf-8"))


@pytest.fixture
def template_text() -> str:
    return (STATEMENT_DIR / "templates" / "statement.html").read_text(encoding="utf-8")


@pytest.fixture
def statement_base(tmp_path: Path) -> Path:
    """A throwaway copy of data.json, templates/, styles/ and assets/."""
    base = tmp_path / "statement"
    base.mkdir()
    shutil.copy(STATEMENT_DIR / "data.json", base / "data.json")
    for name in ("templates", "styles", "assets"):
        shutil.copytree(STATEMENT_DIR / name, base / name)
    return base
