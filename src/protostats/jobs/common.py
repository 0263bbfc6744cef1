"""Shared wiring for the batch jobs: logging, store construction, config."""

from __future__ import annotations

import logging

from protostats.aggregation.rules import load_rules
from protostats.config import Settings
from protostats.db.session import get_session, init_db
from protostats.normalize.events import build_event_schemas
from protostats.store.base import DocumentStore
from protostats.store.sql import SqlDocumentStore
from protostats.worker.collector import CollectorConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def open_store(settings: Settings) -> DocumentStore:
    """Construct the configured document store.

    Raises:
        FileNotFoundError: If the Firestore credential file is missing.
        ValueError: If the credential file is malformed.
    """
    if settings.store == "sqlite":
        init_db(settings.db_path)
        return SqlDocumentStore(get_session(settings.db_path), owns_session=True)

    # Imported lazily so the SQLite mirror works without Firebase installed
    from protostats.store.firestore import FirestoreDocumentStore

    return FirestoreDocumentStore.from_service_account(
        settings.credentials_path, settings.firebase_project
    )


def build_collector_config(settings: Settings) -> CollectorConfig:
    """Translate settings into collector configuration.

    Raises:
        ValueError: On unknown event schemas or malformed rules.
        FileNotFoundError: If the rules file is missing.
    """
    return CollectorConfig(
        test_prefix=settings.test_prefix,
        window_days=settings.window_days,
        top_n=settings.top_n,
        download_offset=settings.download_offset,
        rules=load_rules(settings.rules_path),
        event_schemas=build_event_schemas(settings.event_schemas, months=settings.event_months),
    )
