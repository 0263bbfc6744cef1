"""Stats collector for snapshot runs.

Architecture:
- StatsCollector: issues the sequential store reads, then folds them
  through the pure aggregation functions
- CollectorConfig: everything a run needs besides the store handle

Reads are best-effort. A failed read degrades the metrics that depend on
it to None (or [] for top protocols) and is logged as a warning; the
rest of the snapshot is still computed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeVar

from protostats.aggregation import counts
from protostats.aggregation.display import DEFAULT_DISPLAY_FLOORS, build_display
from protostats.aggregation.rules import DEFAULT_RULES, EVENT_COUNTERS
from protostats.core.timeutil import Window, trailing_days, utc_now
from protostats.models.domain import EventRecord, UploadRecord, UserRecord
from protostats.models.types import RawStats, StatsSnapshot
from protostats.normalize.events import (
    DEFAULT_UPLOADS_COLLECTION,
    DEFAULT_USERS_COLLECTION,
    EventSchema,
    FlatEventSchema,
    normalize_upload,
    normalize_user,
    read_events,
)
from protostats.store.base import DocumentStore, FieldRange

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_PROTOCOL = "Unknown"


@dataclass
class CollectorConfig:
    """Aggregation settings for one run."""

    test_prefix: str = "UQLMSLQZ"
    window_days: int = 30
    top_n: int = 3
    download_offset: int = 122
    rules: dict[tuple[str, str], str] = field(default_factory=lambda: dict(DEFAULT_RULES))
    event_schemas: list[EventSchema] = field(default_factory=lambda: [FlatEventSchema()])
    uploads_collection: str = DEFAULT_UPLOADS_COLLECTION
    users_collection: str = DEFAULT_USERS_COLLECTION
    display_floors: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_DISPLAY_FLOORS))


class StatsCollector:
    """Builds a StatsSnapshot from a document store.

    Holds no state beyond one run's reads; construct one per run.
    """

    def __init__(
        self,
        store: DocumentStore,
        config: CollectorConfig | None = None,
        now: datetime | None = None,
    ):
        """Initialize collector.

        Args:
            store: Document store handle.
            config: Aggregation settings. Defaults to CollectorConfig().
            now: Reference time for windows. Defaults to the current time.
        """
        self.store = store
        self.config = config or CollectorConfig()
        self.now = now or utc_now()
        self.window: Window = trailing_days(self.config.window_days, self.now)
        self.failures: list[str] = []

    def collect(self) -> StatsSnapshot:
        """Run the read phase and aggregate into a snapshot."""
        events = self._guard("events", self._read_events)
        uploads = self._guard("protocol uploads", self._read_uploads)
        users = self._guard("active users", self._read_active_users)

        raw = self._compute_raw(events, uploads, users)
        top_protocols = self._compute_top_protocols(uploads)

        return StatsSnapshot(
            generated_at=self.now,
            raw=raw,
            display=build_display(raw, self.config.display_floors),
            top_protocols=top_protocols,
        )

    # ------------------------------------------------------------------
    # Read phase
    # ------------------------------------------------------------------

    def _guard(self, what: str, read: Callable[[], T]) -> T | None:
        """Run one read, substituting None on failure."""
        try:
            return read()
        except Exception as e:
            logger.warning(f"Could not fetch {what}: {e}")
            self.failures.append(what)
            return None

    def _read_events(self) -> list[EventRecord]:
        records = read_events(self.store, self.config.event_schemas)
        logger.info(f"Read {len(records)} events")
        return records

    def _read_uploads(self) -> list[UploadRecord]:
        documents = self.store.list_documents(self.config.uploads_collection)
        logger.info(f"Read {len(documents)} protocol uploads")
        return [normalize_upload(d) for d in documents]

    def _read_active_users(self) -> list[UserRecord]:
        documents = self.store.list_documents(
            self.config.users_collection,
            field_range=FieldRange("lastActive", start=self.window.start, end=self.window.end),
        )
        logger.info(f"Read {len(documents)} recently active users")
        return [normalize_user(d) for d in documents]

    # ------------------------------------------------------------------
    # Aggregation phase
    # ------------------------------------------------------------------

    def _compute_raw(
        self,
        events: list[EventRecord] | None,
        uploads: list[UploadRecord] | None,
        users: list[UserRecord] | None,
    ) -> RawStats:
        prefix = self.config.test_prefix
        values: dict[str, int | None] = {}

        # A partial union would silently under-count, so both sources are required
        total_users = None
        if events is not None and uploads is not None:
            total_users = counts.count_distinct_users([events, uploads], prefix)
        values["total_users"] = total_users

        # Downloads track users plus installs that never opened the app
        values["app_store_downloads"] = (
            total_users + self.config.download_offset if total_users else None
        )

        values["active_users"] = (
            counts.count_active_users(users, self.window, prefix) if users is not None else None
        )

        if uploads is not None:
            values["protocols_uploaded"] = counts.count_records(uploads, prefix)
            values["upload_success_rate"] = counts.success_rate(uploads, self.window, prefix)

        if events is not None:
            event_counts = counts.count_by_category_action(events, self.config.rules, prefix)
            for name in EVENT_COUNTERS:
                values[name] = event_counts.get(name)

        return RawStats(**values)

    def _compute_top_protocols(self, uploads: list[UploadRecord] | None) -> list[str]:
        if uploads is None:
            return []

        prefix = self.config.test_prefix

        def qualifies(upload: UploadRecord) -> bool:
            return (
                upload.status == "success"
                and not counts.is_excluded(upload.user_id, prefix)
                and self.window.contains(upload.timestamp)
            )

        return counts.top_n(
            uploads,
            key=lambda upload: upload.protocol_name or UNKNOWN_PROTOCOL,
            n=self.config.top_n,
            predicate=qualifies,
        )
