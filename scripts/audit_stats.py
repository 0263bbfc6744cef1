#!/usr/bin/env python3
"""Print the usage data audit (test vs real users, monthly counts).

Usage:
    python scripts/audit_stats.py

See protostats.jobs.audit for configuration and exit codes.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from protostats.jobs.audit import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
