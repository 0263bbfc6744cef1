"""Firestore-backed document store (production).

The client is built once per job from a service-account credential file
and passed in explicitly; nothing here holds global client state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from protostats.models.domain import Document
from protostats.store.base import DocumentStore, FieldRange, StoreError

logger = logging.getLogger(__name__)

# Upper bound for id-prefix range queries
PREFIX_SENTINEL = "\uf8ff"


class FirestoreDocumentStore(DocumentStore):
    """Document store over a Firestore client."""

    def __init__(self, client: Any, app: firebase_admin.App | None = None):
        """Initialize store.

        Args:
            client: google.cloud.firestore.Client (or compatible).
            app: Firebase app owning the client; deleted on close().
        """
        self.client = client
        self.app = app

    @classmethod
    def from_service_account(
        cls,
        credentials_path: Path,
        project_id: str,
    ) -> FirestoreDocumentStore:
        """Build a store from a service-account key file.

        Raises:
            FileNotFoundError: If the credential file does not exist.
            ValueError: If the credential file is malformed.
        """
        credentials_path = Path(credentials_path)
        if not credentials_path.exists():
            raise FileNotFoundError(f"Credential file not found: {credentials_path}")

        cred = credentials.Certificate(str(credentials_path))
        app = firebase_admin.initialize_app(
            cred,
            {"projectId": project_id},
            name=f"protostats-{project_id}",
        )
        logger.info(f"Connected to Firestore project {project_id}")
        return cls(firestore.client(app), app=app)

    def list_documents(
        self,
        collection: str,
        field_range: FieldRange | None = None,
        id_prefix: str | None = None,
    ) -> list[Document]:
        ref = self.client.collection(collection)
        query = ref

        if field_range is not None:
            if field_range.start is not None:
                query = query.where(filter=FieldFilter(field_range.field, ">=", field_range.start))
            if field_range.end is not None:
                query = query.where(filter=FieldFilter(field_range.field, "<", field_range.end))

        if id_prefix:
            doc_id_path = FieldPath.document_id()
            query = query.where(filter=FieldFilter(doc_id_path, ">=", ref.document(id_prefix)))
            query = query.where(
                filter=FieldFilter(doc_id_path, "<", ref.document(id_prefix + PREFIX_SENTINEL))
            )

        try:
            return [Document(doc_id=snap.id, data=snap.to_dict() or {}) for snap in query.stream()]
        except GoogleAPIError as e:
            raise StoreError(f"Failed to list {collection}: {e}") from e

    def close(self) -> None:
        if self.app is not None:
            firebase_admin.delete_app(self.app)
            self.app = None
