#!/usr/bin/env python3
"""Smoke test for the stats snapshot file.

Validates that the snapshot consumed by the blog templating step exists,
has the expected shape, and is internally consistent.

Usage:
    python scripts/smoke_snapshot.py [path]

Exit codes:
    0: All checks passed
    1: Some checks failed
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from pydantic import ValidationError  # noqa: E402

from protostats.core.snapshot import load_snapshot  # noqa: E402
from protostats.models.types import RawStats, StatsSnapshot  # noqa: E402

# Constants
DEFAULT_SNAPSHOT_PATH = PROJECT_ROOT / "tmp" / "firestore-stats.json"
REQUIRED_KEYS = {"generatedAt", "raw", "display", "topProtocols"}


def check_file_exists(path: Path) -> bool:
    """Check that the snapshot file exists."""
    if not path.exists():
        print(f"FAIL: Snapshot not found: {path}")
        return False
    print(f"OK: Snapshot exists: {path}")
    return True


def check_top_level_keys(path: Path) -> bool:
    """Check the exact top-level layout."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"FAIL: Could not parse snapshot JSON: {e}")
        return False

    keys = set(data) if isinstance(data, dict) else set()
    if keys != REQUIRED_KEYS:
        print("FAIL: Snapshot key mismatch")
        missing = REQUIRED_KEYS - keys
        extra = keys - REQUIRED_KEYS
        if missing:
            print(f"    Missing: {missing}")
        if extra:
            print(f"    Extra: {extra}")
        return False

    print("OK: Snapshot has all required keys")
    return True


def check_consistency(snapshot: StatsSnapshot) -> bool:
    """Check raw/display agreement and value ranges."""
    ok = True

    for name in RawStats.model_fields:
        raw_value = getattr(snapshot.raw, name)
        display_value = getattr(snapshot.display, name)
        if raw_value is None and display_value is not None:
            print(f"FAIL: {name} has display value {display_value!r} but no raw value")
            ok = False
        elif raw_value is not None and display_value is None:
            print(f"FAIL: {name} has raw value {raw_value} but no display value")
            ok = False
        elif raw_value is None:
            print(f"    WARN: {name} unavailable")

    rate = snapshot.raw.upload_success_rate
    if rate is not None and not 0 <= rate <= 100:
        print(f"FAIL: upload_success_rate out of range: {rate}")
        ok = False

    if ok:
        print(f"OK: Snapshot consistent (generated {snapshot.generated_at.isoformat()})")
        print(f"    Top protocols: {', '.join(snapshot.top_protocols) or '(none)'}")
    return ok


def main() -> int:
    """Main entry point."""
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SNAPSHOT_PATH

    print("=" * 60)
    print("ProtoStats Snapshot Smoke Test")
    print("=" * 60)

    checks_passed = 0
    checks_failed = 0

    # Check 1: File exists
    print("\n[1/3] Checking snapshot file...")
    if not check_file_exists(path):
        print("\n" + "=" * 60)
        print("RESULT: 0 passed, 1 failed")
        print("Run 'python scripts/pull_stats.py' first!")
        print("=" * 60)
        return 1

    checks_passed += 1

    # Check 2: Layout
    print("\n[2/3] Checking layout...")
    if check_top_level_keys(path):
        checks_passed += 1
    else:
        checks_failed += 1

    # Check 3: Values
    print("\n[3/3] Checking values...")
    try:
        snapshot = load_snapshot(path)
    except (ValidationError, json.JSONDecodeError) as e:
        print(f"FAIL: Snapshot does not validate: {e}")
        checks_failed += 1
    else:
        if check_consistency(snapshot):
            checks_passed += 1
        else:
            checks_failed += 1

    # Summary
    print("\n" + "=" * 60)
    if checks_failed == 0:
        print(f"RESULT: ALL PASSED ({checks_passed} checks)")
        print("=" * 60)
        return 0
    else:
        print(f"RESULT: {checks_passed} passed, {checks_failed} failed")
        print("=" * 60)
        return 1


if __name__ == "__main__":
    sys.exit(main())
