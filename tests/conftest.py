from __future__ import annotations

import sys
from pathlib import Path

import pytest

_START = Path(__file__).resolve().parent
_repo_root = _START
while _repo_root != _repo_root.parent and not (_repo_root / "time_range_slider" / "__init__.py").exists():
    _repo_root = _repo_root.parent

sys.path.insert(0, str(_repo_root))


@pytest.fixture
def full_range():
    from datetime import datetime

    return datetime(1995, 9, 3), datetime(2026, 2, 11)
