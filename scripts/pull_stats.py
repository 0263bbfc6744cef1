#!/usr/bin/env python3
"""Pull usage stats from the document store into the snapshot file.

Usage:
    python scripts/pull_stats.py

See protostats.jobs.pull_stats for configuration and exit codes.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from protostats.jobs.pull_stats import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
