"""Pull usage stats into the snapshot file.

Exit codes:
    0: Snapshot written (possibly with fallback values)
    1: Fatal setup error (missing credentials, bad configuration)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from protostats.config import Settings, load_settings
from protostats.core.snapshot import write_snapshot
from protostats.jobs.common import build_collector_config, configure_logging, open_store
from protostats.models.types import StatsSnapshot
from protostats.store.base import DocumentStore
from protostats.worker.collector import StatsCollector

logger = logging.getLogger(__name__)


def pull_stats(settings: Settings, store: DocumentStore) -> StatsSnapshot:
    """Collect a snapshot from the store and write it to the output path."""
    collector = StatsCollector(store, build_collector_config(settings))
    snapshot = collector.collect()
    if collector.failures:
        logger.warning(f"Snapshot has fallback values for: {', '.join(collector.failures)}")
    write_snapshot(snapshot, settings.output_path)
    return snapshot


def summary_lines(snapshot: StatsSnapshot, window_days: int = 30) -> list[str]:
    """Human summary of a snapshot for the console."""
    display = snapshot.display

    def show(value: str | None) -> str:
        return value if value is not None else "N/A"

    return [
        f"Total Downloads: {show(display.app_store_downloads)}",
        f"Active Users ({window_days}d): {show(display.active_users)}",
        f"Total Users: {show(display.total_users)}",
        f"Protocols Uploaded: {show(display.protocols_uploaded)}",
        f"Quizzes Generated: {show(display.quizzes_generated)}",
        f"Scenarios Completed: {show(display.scenarios_completed)}",
        f"Algorithm Quizzes: {show(display.algorithm_quizzes)}",
        f"Upload Success Rate: {show(display.upload_success_rate)}",
        f"Top Protocols: {', '.join(snapshot.top_protocols) or 'N/A'}",
    ]


def main(environ: Mapping[str, str] | None = None) -> int:
    try:
        settings = load_settings(environ)
        configure_logging(settings.log_level)
        store = open_store(settings)
    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        return 1

    try:
        snapshot = pull_stats(settings, store)
    except Exception:
        logger.exception("Fatal error while pulling stats")
        return 1
    finally:
        store.close()

    print("Stats pulled successfully:\n")
    for line in summary_lines(snapshot, settings.window_days):
        print(f"   {line}")
    print(f"\nSaved to: {settings.output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
