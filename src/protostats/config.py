"""Job configuration from environment variables.

Every job is flagless; settings come from the environment with hard-coded
fallbacks. Invalid values raise pydantic.ValidationError, which the jobs
treat as fatal.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_KEY_ID = "F29544S3WG"


class Settings(BaseModel):
    """Resolved settings for one job run."""

    # Document store
    store: Literal["firestore", "sqlite"] = "firestore"
    credentials_path: Path = Path("/tmp/firebase-key.json")
    firebase_project: str = "ems-protoquiz-tracking"
    db_path: Path = Path("data/protostats.db")

    # Aggregation
    test_prefix: str = "UQLMSLQZ"
    window_days: int = Field(default=30, ge=1)
    top_n: int = Field(default=3, ge=0)
    download_offset: int = Field(default=122, ge=0)
    event_schemas: list[str] = Field(default_factory=lambda: ["flat"])
    event_months: list[str] = Field(default_factory=list)
    rules_path: Path | None = None
    output_path: Path = Path("tmp/firestore-stats.json")

    # App Store Connect
    app_store_issuer_id: str = "7090c596-196d-4dda-8419-ee53ef718cbf"
    app_store_key_id: str = DEFAULT_KEY_ID
    app_store_app_id: str = "6753611139"
    app_store_private_key_path: Path = Path.home() / ".appstoreconnect" / f"AuthKey_{DEFAULT_KEY_ID}.p8"

    # Blog views
    blog_views_url: str = "https://ems-router.vercel.app/api/blog-views?summary=true"
    blog_slug_prefix: str = "2025-11-22-"

    log_level: str = "INFO"


# Environment variable -> Settings field
ENV_FIELDS: dict[str, str] = {
    "PROTOSTATS_STORE": "store",
    "GOOGLE_APPLICATION_CREDENTIALS": "credentials_path",
    "PROTOSTATS_FIREBASE_PROJECT": "firebase_project",
    "PROTOSTATS_DB_PATH": "db_path",
    "PROTOSTATS_TEST_PREFIX": "test_prefix",
    "PROTOSTATS_WINDOW_DAYS": "window_days",
    "PROTOSTATS_TOP_N": "top_n",
    "PROTOSTATS_DOWNLOAD_OFFSET": "download_offset",
    "PROTOSTATS_EVENT_SCHEMA": "event_schemas",
    "PROTOSTATS_EVENT_MONTHS": "event_months",
    "PROTOSTATS_RULES_PATH": "rules_path",
    "PROTOSTATS_OUTPUT_PATH": "output_path",
    "APP_STORE_ISSUER_ID": "app_store_issuer_id",
    "APP_STORE_KEY_ID": "app_store_key_id",
    "APP_STORE_APP_ID": "app_store_app_id",
    "APP_STORE_PRIVATE_KEY_PATH": "app_store_private_key_path",
    "PROTOSTATS_BLOG_VIEWS_URL": "blog_views_url",
    "PROTOSTATS_BLOG_SLUG_PREFIX": "blog_slug_prefix",
    "LOG_LEVEL": "log_level",
}


# Comma-separated list variables
LIST_FIELDS = ("event_schemas", "event_months")

def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Unset or empty variables keep their defaults. The private key path
    defaults to AuthKey_<key id>.p8 when only APP_STORE_KEY_ID is set.

    Args:
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Validated Settings.
    """
    if environ is None:
        environ = os.environ

    values: dict[str, object] = {}
    for env_name, field_name in ENV_FIELDS.items():
        raw = environ.get(env_name, "").strip()
        if not raw:
            continue
        if field_name in LIST_FIELDS:
            values[field_name] = [part.strip() for part in raw.split(",") if part.strip()]
        else:
            values[field_name] = raw

    if "app_store_key_id" in values and "app_store_private_key_path" not in values:
        key_id = values["app_store_key_id"]
        values["app_store_private_key_path"] = (
            Path.home() / ".appstoreconnect" / f"AuthKey_{key_id}.p8"
        )

    return Settings(**values)
