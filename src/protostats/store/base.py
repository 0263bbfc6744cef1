"""Base document store interface.

Store adapters expose a narrow read interface:
`list_documents(collection, field_range, id_prefix) -> list[Document]`.

Stores must NOT:
- Apply the test-account exclusion
- Normalize event schemas
- Aggregate
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from protostats.models.domain import Document


class StoreError(RuntimeError):
    """Raised when a store read fails (network, auth, missing collection)."""


@dataclass(frozen=True)
class FieldRange:
    """Half-open range filter [start, end) on a single document field."""

    field: str
    start: datetime | None = None
    end: datetime | None = None


class DocumentStore(ABC):
    """Abstract base class for document stores.

    Handles are constructed explicitly and passed to the collector, so tests
    can substitute an in-memory SQLite store.
    """

    @abstractmethod
    def list_documents(
        self,
        collection: str,
        field_range: FieldRange | None = None,
        id_prefix: str | None = None,
    ) -> list[Document]:
        """List documents in a named collection.

        Args:
            collection: Collection name.
            field_range: Optional range filter on one field.
            id_prefix: Optional document-id prefix filter.

        Returns:
            Matching documents.

        Raises:
            StoreError: If the read fails.
        """
        pass

    def close(self) -> None:
        """Release any client resources."""
        pass
