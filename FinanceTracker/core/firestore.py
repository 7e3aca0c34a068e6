"""Google Cloud Firestore backend for the document store contract.

Live queries use ``Query.on_snapshot``. Snapshot callbacks run on the Firestore
watch thread; consumers are expected to marshal them onto their own thread (see
:class:`FinanceTracker.core.subscription.SubscriptionManager`).
"""
import logging
from typing import Any, Dict, Optional

from google.api_core import exceptions as api_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .store import DocumentNotFoundError, DocumentStore, OnChange, OnError, Subscription


class FirestoreStore(DocumentStore):
    """Document store backed by a Firestore database.

    Args:
        client: An existing ``firestore.Client``. Created from ``project`` and
            ``credentials`` when omitted.
        project: Google Cloud project id.
        credentials: ``google.auth`` credentials.
    """

    def __init__(self, client: Optional[Any] = None, project: Optional[str] = None, credentials: Optional[Any] = None):
        if client is None:
            client = firestore.Client(project=project or None, credentials=credentials)
            logging.debug(f'Firestore client created for project "{client.project}"')
        self._client = client

    def subscribe(self, collection: str, user_id: str, on_change: OnChange, on_error: OnError) -> Subscription:
        query = self._client.collection(collection).where(filter=FieldFilter('userId', '==', user_id))

        def callback(docs, changes, read_time) -> None:
            try:
                snapshot = [{'id': doc.id, **(doc.to_dict() or {})} for doc in docs]
            except Exception as ex:
                logging.error(f'Failed to read "{collection}" snapshot: {ex}')
                on_error(ex)
                return
            logging.debug(f'Received {len(snapshot)} "{collection}" document(s) at {read_time}')
            on_change(snapshot)

        watch = query.on_snapshot(callback)
        logging.debug(f'Watching "{collection}" for user "{user_id}"')
        return Subscription(watch.unsubscribe)

    def create(self, collection: str, fields: Dict[str, Any]) -> str:
        _, ref = self._client.collection(collection).add(dict(fields))
        return ref.id

    def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> None:
        try:
            self._client.collection(collection).document(record_id).update(dict(fields))
        except api_exceptions.NotFound as ex:
            raise DocumentNotFoundError(collection, record_id) from ex

    def delete(self, collection: str, record_id: str) -> None:
        try:
            self._client.collection(collection).document(record_id).delete()
        except api_exceptions.NotFound as ex:
            raise DocumentNotFoundError(collection, record_id) from ex

    def close(self) -> None:
        try:
            self._client.close()
        except Exception as ex:
            logging.debug(f'Failed closing Firestore client: {ex}')
