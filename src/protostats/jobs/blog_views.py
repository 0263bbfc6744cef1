"""Print blog post view counts, most viewed first.

Exit codes:
    0: Report printed (including "no views tracked yet")
    1: Fetch failed
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from protostats.config import load_settings
from protostats.jobs.common import configure_logging
from protostats.providers.blog_views import fetch_blog_views
from protostats.report.blog_views import format_views_table

logger = logging.getLogger(__name__)


def main(environ: Mapping[str, str] | None = None) -> int:
    try:
        settings = load_settings(environ)
        configure_logging(settings.log_level)
        print("Fetching blog view statistics...\n")
        views = fetch_blog_views(settings.blog_views_url)
    except Exception as e:
        logger.error(f"Error fetching stats: {e}")
        return 1

    for line in format_views_table(views, settings.blog_slug_prefix):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
