#!/usr/bin/env python3
"""Seed the local SQLite mirror with demo usage data.

Creates a small, deterministic data set in the same shapes the app backend
writes to Firestore, so the jobs can be run end to end offline.

Usage:
    python scripts/seed_local_store.py
    PROTOSTATS_STORE=sqlite PROTOSTATS_DB_PATH=demo.db python scripts/pull_stats.py

This script:
1. Initializes the demo database
2. Seeds events (flat and month-partitioned ids), including test-account events
3. Seeds protocol uploads with mixed statuses
4. Seeds user profiles with recent and stale activity
"""

from __future__ import annotations

import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from protostats.db import repo  # noqa: E402
from protostats.db.session import get_db_session, init_db  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "demo.db"
TEST_PREFIX = "UQLMSLQZ"

# Deterministic demo data
DEMO_SEED = 42
DEMO_USERS = [f"user-{i:03d}" for i in range(40)]
DEMO_TEST_USERS = [TEST_PREFIX, f"{TEST_PREFIX}-ipad"]
DEMO_PROTOCOLS = ["Sepsis", "Stroke", "STEMI", "Anaphylaxis", "Cardiac Arrest"]

EVENT_ACTIONS = [
    ("quiz", "quiz_started"),
    ("quiz", "quiz_completed"),
    ("quiz", "algorithm_completed"),
    ("scenario", "generation_completed"),
    ("protocol", "upload_completed"),
    ("protocol", "extraction_completed"),
]


def seed_events(session, rng: random.Random, now: datetime) -> int:
    """Seed the events collection. Returns the number of documents written."""
    count = 0
    for i in range(300):
        when = now - timedelta(days=rng.randint(0, 60), minutes=rng.randint(0, 1440))
        category, action = rng.choice(EVENT_ACTIONS)
        user_id = rng.choice(DEMO_USERS + DEMO_TEST_USERS)

        data = {
            "category": category,
            "action": action,
            "timestamp": when,
            "deviceId": f"device-{rng.randint(0, 60):03d}",
        }
        # Older app builds did not attach a user id
        if rng.random() > 0.1:
            data["userId"] = user_id

        # Newer backend writes month-partitioned ids
        doc_id = f"{when:%Y-%m}_{i:05d}" if i % 2 else f"evt-{i:05d}"
        repo.put_document(session, "events", doc_id, data)
        count += 1
    return count


def seed_uploads(session, rng: random.Random, now: datetime) -> int:
    """Seed the protocol_uploads collection."""
    count = 0
    for i in range(80):
        data = {
            "status": rng.choices(["success", "failure", "pending"], weights=[7, 2, 1])[0],
            "userId": rng.choice(DEMO_USERS + DEMO_TEST_USERS),
            "timestamp": now - timedelta(days=rng.randint(0, 45)),
        }
        if rng.random() > 0.15:
            data["protocolName"] = rng.choice(DEMO_PROTOCOLS)
        repo.put_document(session, "protocol_uploads", f"upload-{i:04d}", data)
        count += 1
    return count


def seed_users(session, rng: random.Random, now: datetime) -> int:
    """Seed the users collection, keyed by user id."""
    for user_id in DEMO_USERS + DEMO_TEST_USERS:
        created = now - timedelta(days=rng.randint(30, 90))
        last_active = now - timedelta(days=rng.randint(0, 60))
        repo.put_document(
            session,
            "users",
            user_id,
            {"createdAt": created, "lastActive": last_active},
        )
    return len(DEMO_USERS) + len(DEMO_TEST_USERS)


def main() -> int:
    """Main entry point."""
    print("=" * 60)
    print("ProtoStats Local Store Seeding Script")
    print("=" * 60)

    rng = random.Random(DEMO_SEED)
    now = datetime.now(timezone.utc)

    print("\n[1/4] Initializing database...")
    init_db(DEMO_DB_PATH)

    with get_db_session(DEMO_DB_PATH) as session:
        print("\n[2/4] Seeding events...")
        print(f"  Wrote {seed_events(session, rng, now)} events")

        print("\n[3/4] Seeding protocol uploads...")
        print(f"  Wrote {seed_uploads(session, rng, now)} uploads")

        print("\n[4/4] Seeding users...")
        print(f"  Wrote {seed_users(session, rng, now)} users")

    print("\n" + "=" * 60)
    print("Seeding complete!")
    print(f"Database: {DEMO_DB_PATH}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
