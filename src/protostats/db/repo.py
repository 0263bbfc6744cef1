"""Repository pattern for the local document mirror.

Encapsulates all SQLAlchemy queries. Returns domain Documents (not
SQLAlchemy entities) to external callers.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from protostats.db.schema import StoredDocument
from protostats.models.domain import Document

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession"]


# ============================================================================
# Converters
# ============================================================================


def _json_default(value: Any) -> str:
    """Serialize datetimes stored inside document data as ISO strings."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _document_to_entity(row: StoredDocument) -> Document:
    """Convert SQLAlchemy StoredDocument to domain Document."""
    return Document(doc_id=row.doc_id, data=json.loads(row.data_json))


# ============================================================================
# Document Repository
# ============================================================================


def list_documents(
    session: DbSession,
    collection: str,
    id_prefix: str | None = None,
) -> list[Document]:
    """List documents in a collection, optionally by document-id prefix.

    The prefix is matched literally; "_" and "%" are escaped.
    """
    query = session.query(StoredDocument).filter(StoredDocument.collection == collection)
    if id_prefix:
        query = query.filter(StoredDocument.doc_id.startswith(id_prefix, autoescape=True))
    rows = query.order_by(StoredDocument.id).all()
    return [_document_to_entity(r) for r in rows]


def get_document(session: DbSession, collection: str, doc_id: str) -> Document | None:
    """Get a single document by collection and id."""
    row = (
        session.query(StoredDocument)
        .filter(StoredDocument.collection == collection, StoredDocument.doc_id == doc_id)
        .first()
    )
    return _document_to_entity(row) if row else None


def put_document(
    session: DbSession,
    collection: str,
    doc_id: str,
    data: dict[str, Any],
) -> Document:
    """Insert or replace a document."""
    data_json = json.dumps(data, default=_json_default, sort_keys=True)
    row = (
        session.query(StoredDocument)
        .filter(StoredDocument.collection == collection, StoredDocument.doc_id == doc_id)
        .first()
    )
    if row:
        row.data_json = data_json
    else:
        session.add(StoredDocument(collection=collection, doc_id=doc_id, data_json=data_json))
    return Document(doc_id=doc_id, data=json.loads(data_json))


def count_documents(session: DbSession, collection: str) -> int:
    """Count documents in a collection."""
    return session.query(StoredDocument).filter(StoredDocument.collection == collection).count()


def list_collections(session: DbSession) -> list[str]:
    """List distinct collection names."""
    rows = session.query(StoredDocument.collection).distinct().order_by(StoredDocument.collection)
    return [r[0] for r in rows]


# ============================================================================
# Batch Operations
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    session.commit()
