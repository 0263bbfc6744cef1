"""Domain models for protostats.

Pure Python dataclasses representing the records the aggregation jobs read.
These models are independent of any storage backend; store adapters and
schema normalizers convert raw documents into them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


# ============================================================================
# Store Domain
# ============================================================================


@dataclass
class Document:
    """A raw document as returned by a document store."""

    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)


# ============================================================================
# Event Domain
# ============================================================================

@dataclass
class EventRecord:
    """Normalized usage event, independent of the schema it was read from.

    partition is the YYYY-MM month for month-partitioned documents.
    """

    category: str
    action: str
    user_id: str | None = None
    timestamp: datetime | None = None
    doc_id: str | None = None
    partition: str | None = None
    device_id: str | None = None


# ============================================================================
# Upload Domain
# ============================================================================

@dataclass
class UploadRecord:
    """A protocol upload attempt."""

    status: str
    user_id: str | None = None
    protocol_name: str | None = None
    timestamp: datetime | None = None
    doc_id: str | None = None
    device_id: str | None = None


# ============================================================================
# User Domain
# ============================================================================


@dataclass
class UserRecord:
    """A user profile keyed by its (possibly test-prefixed) identifier."""

    user_id: str
    last_active: datetime | None = None
    created_at: datetime | None = None
