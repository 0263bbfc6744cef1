"""SQLite-backed document store.

Serves the local mirror and in-memory test stores. Id-prefix filtering
runs in SQL; field-range filtering runs in Python on parsed timestamps,
since the range fields live inside the JSON payload.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from protostats.core.timeutil import Window, parse_timestamp
from protostats.db import repo
from protostats.db.repo import DbSession
from protostats.models.domain import Document
from protostats.store.base import DocumentStore, FieldRange, StoreError


class SqlDocumentStore(DocumentStore):
    """Document store over the `documents` table."""

    def __init__(self, session: DbSession, owns_session: bool = False):
        """Initialize store.

        Args:
            session: Database session.
            owns_session: Close the session when the store is closed.
        """
        self.session = session
        self.owns_session = owns_session

    def list_documents(
        self,
        collection: str,
        field_range: FieldRange | None = None,
        id_prefix: str | None = None,
    ) -> list[Document]:
        try:
            documents = repo.list_documents(self.session, collection, id_prefix=id_prefix)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list {collection}: {e}") from e

        if field_range is None:
            return documents

        window = Window(start=field_range.start, end=field_range.end)
        return [
            doc
            for doc in documents
            if window.contains(parse_timestamp(doc.data.get(field_range.field)))
        ]

    def put_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> Document:
        """Insert or replace a document (seeding the mirror)."""
        try:
            return repo.put_document(self.session, collection, doc_id, data)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write {collection}/{doc_id}: {e}") from e

    def commit(self) -> None:
        repo.commit(self.session)

    def close(self) -> None:
        if self.owns_session:
            self.session.close()
