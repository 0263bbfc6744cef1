"""Event schema normalization.

The app backend has written usage events in three shapes over time:
- flat: one `events` collection, every document carries category/action
- monthly: the same collection with ids partitioned as `YYYY-MM_<suffix>`
- success collections: a dedicated collection per milestone, where each
  document is itself one event of a fixed (category, action)

Each shape gets one adapter that turns raw documents into EventRecord, so
the aggregator never branches on schema version.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any

from protostats.core.timeutil import month_from_doc_id, parse_timestamp
from protostats.models.domain import Document, EventRecord, UploadRecord, UserRecord
from protostats.store.base import DocumentStore

DEFAULT_EVENTS_COLLECTION = "events"
DEFAULT_UPLOADS_COLLECTION = "protocol_uploads"
DEFAULT_USERS_COLLECTION = "users"

# Partition key accepted for month-limited reads
MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value)
    return value or None


class EventSchema(ABC):
    """Adapter for one historical event shape."""

    name: str = ""

    @abstractmethod
    def normalize(self, document: Document) -> EventRecord | None:
        """Extract (category, action, user_id, timestamp) from a document.

        Returns:
            EventRecord, or None when the document is not an event.
        """
        pass

    @abstractmethod
    def read(self, store: DocumentStore) -> list[EventRecord]:
        """Read and normalize every event this schema covers."""
        pass

    def _normalize_all(self, documents: list[Document]) -> list[EventRecord]:
        records = []
        for document in documents:
            record = self.normalize(document)
            if record is not None:
                records.append(record)
        return records


class FlatEventSchema(EventSchema):
    """Events stored as self-describing documents in one collection."""

    name = "flat"

    def __init__(self, collection: str = DEFAULT_EVENTS_COLLECTION):
        self.collection = collection

    def normalize(self, document: Document) -> EventRecord | None:
        data = document.data
        category = _str_or_none(data.get("category"))
        action = _str_or_none(data.get("action"))
        if category is None or action is None:
            return None

        return EventRecord(
            category=category,
            action=action,
            user_id=_str_or_none(data.get("userId")),
            timestamp=parse_timestamp(data.get("timestamp")),
            doc_id=document.doc_id,
            partition=month_from_doc_id(document.doc_id),
            device_id=_str_or_none(data.get("deviceId")),
        )

    def read(self, store: DocumentStore) -> list[EventRecord]:
        return self._normalize_all(store.list_documents(self.collection))


class MonthPartitionedEventSchema(FlatEventSchema):
    """Events whose document ids start with a `YYYY-MM_` partition.

    With explicit months, each month is read through the store's id-prefix
    filter. Without, the whole collection is read and documents lacking a
    partition are dropped.
    """

    name = "monthly"

    def __init__(
        self,
        collection: str = DEFAULT_EVENTS_COLLECTION,
        months: list[str] | None = None,
    ):
        super().__init__(collection)
        self.months = months

    def normalize(self, document: Document) -> EventRecord | None:
        if month_from_doc_id(document.doc_id) is None:
            return None
        return super().normalize(document)

    def read(self, store: DocumentStore) -> list[EventRecord]:
        if not self.months:
            return self._normalize_all(store.list_documents(self.collection))

        records: list[EventRecord] = []
        for month in self.months:
            documents = store.list_documents(self.collection, id_prefix=f"{month}_")
            records.extend(self._normalize_all(documents))
        return records


class SuccessCollectionSchema(EventSchema):
    """A collection where every document is one fixed (category, action) event.

    When status_field is set, only documents whose field equals "success"
    count as events.
    """

    name = "success"

    def __init__(
        self,
        collection: str,
        category: str,
        action: str,
        status_field: str | None = None,
    ):
        self.collection = collection
        self.category = category
        self.action = action
        self.status_field = status_field

    def normalize(self, document: Document) -> EventRecord | None:
        data = document.data
        if self.status_field and data.get(self.status_field) != "success":
            return None

        return EventRecord(
            category=self.category,
            action=self.action,
            user_id=_str_or_none(data.get("userId")),
            timestamp=parse_timestamp(data.get("timestamp")),
            doc_id=document.doc_id,
            partition=month_from_doc_id(document.doc_id),
            device_id=_str_or_none(data.get("deviceId")),
        )

    def read(self, store: DocumentStore) -> list[EventRecord]:
        return self._normalize_all(store.list_documents(self.collection))


# ============================================================================
# Non-event records
# ============================================================================


def normalize_upload(document: Document) -> UploadRecord:
    """Convert a protocol_uploads document to an UploadRecord."""
    data = document.data
    return UploadRecord(
        status=str(data.get("status") or "pending"),
        user_id=_str_or_none(data.get("userId")),
        protocol_name=_str_or_none(data.get("protocolName")),
        timestamp=parse_timestamp(data.get("timestamp")),
        doc_id=document.doc_id,
        device_id=_str_or_none(data.get("deviceId")),
    )


def normalize_user(document: Document) -> UserRecord:
    """Convert a users document to a UserRecord keyed by document id."""
    data = document.data
    return UserRecord(
        user_id=document.doc_id,
        last_active=parse_timestamp(data.get("lastActive")),
        created_at=parse_timestamp(data.get("createdAt")),
    )


# ============================================================================
# Schema selection
# ============================================================================


def build_event_schemas(
    names: list[str],
    events_collection: str = DEFAULT_EVENTS_COLLECTION,
    uploads_collection: str = DEFAULT_UPLOADS_COLLECTION,
    months: list[str] | None = None,
) -> list[EventSchema]:
    """Build event schema adapters from configured names.

    Supported names: "flat", "monthly", "success". The "success" adapter
    reads successful protocol uploads as protocol/upload_completed events.
    `months` (YYYY-MM) limits the "monthly" adapter to those partitions.

    Raises:
        ValueError: If a name or month is malformed, or no names are given.
    """
    for month in months or []:
        if not MONTH_RE.match(month):
            raise ValueError(f"Event month must be YYYY-MM, got {month!r}")

    schemas: list[EventSchema] = []
    for name in names:
        name = name.strip().lower()
        if not name:
            continue
        if name == FlatEventSchema.name:
            schemas.append(FlatEventSchema(events_collection))
        elif name == MonthPartitionedEventSchema.name:
            schemas.append(MonthPartitionedEventSchema(events_collection, months=months or None))
        elif name == SuccessCollectionSchema.name:
            schemas.append(
                SuccessCollectionSchema(
                    uploads_collection,
                    category="protocol",
                    action="upload_completed",
                    status_field="status",
                )
            )
        else:
            raise ValueError(f"Unknown event schema: {name}")

    if not schemas:
        raise ValueError("At least one event schema is required")
    return schemas


def read_events(store: DocumentStore, schemas: list[EventSchema]) -> list[EventRecord]:
    """Read events through every configured schema, sequentially."""
    records: list[EventRecord] = []
    for schema in schemas:
        records.extend(schema.read(store))
    return records
