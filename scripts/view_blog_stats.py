#!/usr/bin/env python3
"""Print blog post view counts.

Usage:
    python scripts/view_blog_stats.py

See protostats.jobs.blog_views for configuration and exit codes.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from protostats.jobs.blog_views import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
