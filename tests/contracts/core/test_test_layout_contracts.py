from __future__ import annotations

from pathlib import Path

import pytest

pytestmark = pytest.mark.contract


def test_tests_follow_taxonomy_layout() -> None:
    """All test modules reside under an approved type folder."""
    allowed = {"unit", "contracts", "integration"}
    root = Path(__file__).resolve().parents[2]
    violations: list[str] = []
    for path in root.rglob("test_*.py"):
        first = path.relative_to(root).parts[0]
        if first not in allowed:
            violations.append(str(path))

    assert not violations, (
        "Test files must live under one of {" + ", ".join(sorted(allowed)) + "}. "
        f"Found misplaced tests: {violations}"
    )


def test_test_module_names_are_unique() -> None:
    """Test directories are not packages, so basenames must not collide."""
    root = Path(__file__).resolve().parents[2]
    names = [p.name for p in root.rglob("test_*.py")]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    assert not duplicates, f"Duplicate test module names: {duplicates}"
