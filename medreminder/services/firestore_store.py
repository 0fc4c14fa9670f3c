"""
Thin gateway over Cloud Firestore.

Only equality filters are used; ordering, pagination and aggregation all
happen in Python after the per-user fetch. Every method converts Google API
failures into ``StoreError`` so the controllers deal with one exception type.
"""
import functools
import logging

from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1 import DELETE_FIELD
from google.cloud.firestore_v1.base_query import FieldFilter

from medreminder.errors import StoreError

logger = logging.getLogger(__name__)

# Firestore rejects batches larger than this
BATCH_LIMIT = 500


def _wrap_errors(fn):
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except google_exceptions.GoogleAPIError as e:
            logger.exception("Firestore %s failed", fn.__name__)
            raise StoreError(str(e)) from e
    return wrapper


class FirestoreStore:
    def __init__(self, client):
        self._db = client

    def _query(self, collection, filters):
        q = self._db.collection(collection)
        for field, value in (filters or {}).items():
            q = q.where(filter=FieldFilter(field, "==", value))
        return q

    @_wrap_errors
    def find(self, collection, filters):
        return [(snap.id, snap.to_dict() or {}) for snap in self._query(collection, filters).stream()]

    @_wrap_errors
    def get(self, collection, doc_id):
        snap = self._db.collection(collection).document(doc_id).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    @_wrap_errors
    def add(self, collection, data):
        _, ref = self._db.collection(collection).add(data)
        return ref.id

    @_wrap_errors
    def update(self, collection, doc_id, data):
        # None removes the field instead of storing null
        data = {k: (DELETE_FIELD if v is None else v) for k, v in data.items()}
        self._db.collection(collection).document(doc_id).update(data)

    @_wrap_errors
    def delete(self, collection, doc_id):
        self._db.collection(collection).document(doc_id).delete()

    @_wrap_errors
    def delete_many(self, collection, doc_ids):
        doc_ids = list(doc_ids)
        col = self._db.collection(collection)
        for start in range(0, len(doc_ids), BATCH_LIMIT):
            batch = self._db.batch()
            for doc_id in doc_ids[start:start + BATCH_LIMIT]:
                batch.delete(col.document(doc_id))
            batch.commit()
        return len(doc_ids)

    def subscribe(self, collection, filters, callback):
        """
        Calls ``callback(rows)`` with the full result set now and after every
        change. Returns a zero-argument function that releases the listener.
        """
        def on_snapshot(docs, changes, read_time):
            callback([(snap.id, snap.to_dict() or {}) for snap in docs])

        try:
            watch = self._query(collection, filters).on_snapshot(on_snapshot)
        except google_exceptions.GoogleAPIError as e:
            logger.exception("Firestore subscribe to %s failed", collection)
            raise StoreError(str(e)) from e
        return watch.unsubscribe
