import logging
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from fridgy.models.base import DocumentModel

T = TypeVar("T", bound=DocumentModel)

logger = logging.getLogger(__name__)

# Firestore caps a write batch at 500 operations.
MAX_BATCH_WRITES = 450
DELETE_PAGE_SIZE = 200


def is_permission_denied(ex: Exception) -> bool:
    return "PERMISSION_DENIED" in str(ex) or type(ex).__name__ == "PermissionDenied"


class BaseRepository(Generic[T]):
    """
    Base repository with common CRUD operations over one Firestore collection.

    Reads degrade to ``None``/``[]`` and writes to ``False`` when the client
    raises; the failure is logged, not propagated.
    """

    def __init__(self, model: Type[T], db, collection_name: str):
        """
        Initialize repository with model and Firestore client.

        Args:
            model: The DocumentModel subclass stored in the collection
            db: Firestore client
            collection_name: Top-level collection name
        """
        self.model = model
        self.db = db
        self.collection_name = collection_name

    @property
    def collection(self):
        return self.db.collection(self.collection_name)

    def document(self, doc_id: Optional[str] = None):
        if doc_id is None:
            return self.collection.document()
        return self.collection.document(doc_id)

    def get(self, doc_id: str) -> Optional[T]:
        """Get a single document by ID."""
        if not doc_id:
            return None
        try:
            return self.model.from_snapshot(self.document(doc_id).get())
        except Exception as ex:
            logger.error("Error fetching %s/%s: %s", self.collection_name, doc_id, ex)
            return None

    def get_all(self, limit: int = 100) -> List[T]:
        """Get documents in the collection, up to ``limit``."""
        return self.query(self.collection.limit(limit))

    def query(self, query) -> List[T]:
        """Run a query and map each snapshot to the model."""
        try:
            return self.to_models(query.stream())
        except Exception as ex:
            logger.error("Query on %s failed: %s", self.collection_name, ex)
            return []

    def create(self, obj: T) -> T:
        """Create a new document; an empty ID gets an auto-generated one."""
        doc_id = obj.document_id or None
        ref = self.document(doc_id)
        ref.set(obj.to_document())
        return obj.model_copy(update={obj.id_field: ref.id})

    def set(self, doc_id: str, data: Dict[str, Any], merge: bool = False) -> bool:
        try:
            self.document(doc_id).set(data, merge=merge)
            return True
        except Exception as ex:
            logger.error("Error writing %s/%s: %s", self.collection_name, doc_id, ex)
            return False

    def update(self, doc_id: str, data: Dict[str, Any]) -> bool:
        """Update fields on a document. Returns False if the write failed."""
        try:
            self.document(doc_id).update(data)
            return True
        except Exception as ex:
            logger.error("Error updating %s/%s: %s", self.collection_name, doc_id, ex)
            return False

    def delete(self, doc_id: str) -> bool:
        """Delete a document by ID. Returns False if the delete failed."""
        try:
            self.document(doc_id).delete()
            return True
        except Exception as ex:
            logger.error("Error deleting %s/%s: %s", self.collection_name, doc_id, ex)
            return False

    def exists(self, doc_id: str) -> bool:
        """Check if a document exists by ID."""
        try:
            return bool(doc_id) and self.document(doc_id).get().exists
        except Exception as ex:
            logger.error("Error checking %s/%s: %s", self.collection_name, doc_id, ex)
            return False

    def to_models(self, snapshots: Iterable) -> List[T]:
        return [self.model.from_document(snap.id, snap.to_dict()) for snap in snapshots]

    def listen(self, query, on_change: Callable[[List[T]], None], on_error: Callable[[Exception], None]):
        """
        Attach a snapshot listener to ``query``.

        Returns the Watch handle; call ``unsubscribe()`` on it to stop.
        """

        def _on_snapshot(snapshots, changes, read_time):
            try:
                on_change(self.to_models(snapshots))
            except Exception as ex:
                logger.error("Snapshot handler on %s failed: %s", self.collection_name, ex)
                on_error(ex)

        return query.on_snapshot(_on_snapshot)

    def delete_collection_in_batches(self, collection_ref, page_size: int = DELETE_PAGE_SIZE) -> int:
        """
        Delete every document in ``collection_ref`` page by page.
        Raises on failure; callers decide whether a partial delete is fatal.
        """
        deleted = 0
        while True:
            docs = list(collection_ref.limit(page_size).stream())
            if not docs:
                break

            batch = self.db.batch()
            for doc in docs:
                batch.delete(doc.reference)
            batch.commit()
            deleted += len(docs)

            if len(docs) < page_size:
                break
        return deleted
