"""Print the data audit for the usage collections.

Exit codes:
    0: Audit printed
    1: Setup or read failure
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from protostats.aggregation.rules import load_rules
from protostats.config import load_settings
from protostats.jobs.common import configure_logging, open_store
from protostats.normalize.events import build_event_schemas
from protostats.report.audit import format_audit, run_audit

logger = logging.getLogger(__name__)


def main(environ: Mapping[str, str] | None = None) -> int:
    try:
        settings = load_settings(environ)
        configure_logging(settings.log_level)
        schemas = build_event_schemas(settings.event_schemas, months=settings.event_months)
        rules = load_rules(settings.rules_path)
        store = open_store(settings)
    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        return 1

    try:
        report = run_audit(store, schemas, rules, settings.test_prefix)
    except Exception:
        logger.exception("Audit failed")
        return 1
    finally:
        store.close()

    for line in format_audit(report):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
