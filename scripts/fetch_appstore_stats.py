#!/usr/bin/env python3
"""Fetch App Store Connect app stats.

Usage:
    python scripts/fetch_appstore_stats.py

See protostats.jobs.appstore for configuration and exit codes.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from protostats.jobs.appstore import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
