"""Fetch App Store Connect app stats and print them as JSON.

Exit codes:
    0: Stats fetched
    1: Missing key file, API error, or bad configuration
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

import requests

from protostats.config import Settings, load_settings
from protostats.jobs.common import configure_logging
from protostats.models.types import AppInfo
from protostats.providers.appstore import AppStoreClient

logger = logging.getLogger(__name__)


def fetch_appstore_stats(settings: Settings, session: requests.Session | None = None) -> AppInfo:
    client = AppStoreClient.from_key_file(
        issuer_id=settings.app_store_issuer_id,
        key_id=settings.app_store_key_id,
        private_key_path=settings.app_store_private_key_path,
        app_id=settings.app_store_app_id,
        session=session,
    )
    return client.fetch_app_info()


def main(environ: Mapping[str, str] | None = None) -> int:
    try:
        settings = load_settings(environ)
        configure_logging(settings.log_level)
        info = fetch_appstore_stats(settings)
    except Exception as e:
        logger.error(f"Failed to fetch App Store stats: {e}")
        return 1

    print(json.dumps(info.model_dump(mode="json", by_alias=True), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
