"""Document store contract and the in-process memory backend.

A store holds named collections of documents. The core only needs four
operations, all scoped by collection name:

- ``subscribe(collection, user_id, on_change, on_error)`` opens a live query for the
  documents whose ``userId`` equals ``user_id``. ``on_change`` receives the full list
  of matching documents on open and after every change; ``on_error`` receives the
  exception if the query fails. Returns a :class:`Subscription` handle.
- ``create(collection, fields)`` adds a document and returns the assigned id.
- ``update(collection, record_id, fields)`` overwrites the given fields of an existing
  document and raises :class:`DocumentNotFoundError` if there is none.
- ``delete(collection, record_id)`` removes a document. Backends may raise
  :class:`DocumentNotFoundError` for unknown ids.

Snapshot documents are plain dicts carrying the document id under ``'id'``.
"""
import abc
import copy
import logging
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

OnChange = Callable[[List[Dict[str, Any]]], None]
OnError = Callable[[Exception], None]


class DocumentNotFoundError(LookupError):
    """Raised by a store when the addressed document does not exist."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f'No document "{record_id}" in "{collection}"')


class Subscription:
    """Handle of a live query. :meth:`unsubscribe` may be called any number of times."""

    def __init__(self, release: Callable[[], None]):
        self._release: Optional[Callable[[], None]] = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()


class DocumentStore(abc.ABC):
    """Abstract document store."""

    @abc.abstractmethod
    def subscribe(self, collection: str, user_id: str, on_change: OnChange, on_error: OnError) -> Subscription:
        ...

    @abc.abstractmethod
    def create(self, collection: str, fields: Dict[str, Any]) -> str:
        ...

    @abc.abstractmethod
    def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> None:
        ...

    @abc.abstractmethod
    def delete(self, collection: str, record_id: str) -> None:
        ...

    def close(self) -> None:
        """Release backend resources."""


class MemoryStore(DocumentStore):
    """Thread-safe, in-process store that pushes snapshots synchronously.

    Listeners are notified on the thread that performed the mutation while the
    store lock is held, so a listener never receives an older snapshot after a
    newer one. Callbacks may re-enter the store from the same thread. Documents
    keep their insertion order.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._listeners: Dict[int, tuple] = {}
        self._next_listener = 0

    def _snapshot(self, collection: str, user_id: str) -> List[Dict[str, Any]]:
        docs = self._collections.get(collection, {})
        return [
            {'id': doc_id, **copy.deepcopy(data)}
            for doc_id, data in docs.items()
            if data.get('userId') == user_id
        ]

    def _notify(self, collection: str) -> None:
        with self._lock:
            pending = [
                (on_change, self._snapshot(collection, user_id))
                for (coll, user_id, on_change, _) in self._listeners.values()
                if coll == collection
            ]
            for on_change, docs in pending:
                on_change(docs)

    def subscribe(self, collection: str, user_id: str, on_change: OnChange, on_error: OnError) -> Subscription:
        with self._lock:
            key = self._next_listener
            self._next_listener += 1
            self._listeners[key] = (collection, user_id, on_change, on_error)
            on_change(self._snapshot(collection, user_id))
        logging.debug(f'Listener {key} subscribed to "{collection}" for user "{user_id}"')

        def release() -> None:
            with self._lock:
                self._listeners.pop(key, None)
            logging.debug(f'Listener {key} released')

        return Subscription(release)

    def create(self, collection: str, fields: Dict[str, Any]) -> str:
        record_id = uuid.uuid4().hex
        with self._lock:
            self._collections.setdefault(collection, {})[record_id] = copy.deepcopy(fields)
        self._notify(collection)
        return record_id

    def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            docs = self._collections.get(collection, {})
            if record_id not in docs:
                raise DocumentNotFoundError(collection, record_id)
            docs[record_id].update(copy.deepcopy(fields))
        self._notify(collection)

    def delete(self, collection: str, record_id: str) -> None:
        with self._lock:
            docs = self._collections.get(collection, {})
            if record_id not in docs:
                raise DocumentNotFoundError(collection, record_id)
            del docs[record_id]
        self._notify(collection)

    def fail_listeners(self, collection: str, error: Exception) -> None:
        """Report ``error`` to every listener of ``collection``, e.g. after losing a connection."""
        with self._lock:
            pending = [
                on_error for (coll, _, _, on_error) in self._listeners.values() if coll == collection
            ]
        for on_error in pending:
            on_error(error)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def close(self) -> None:
        with self._lock:
            self._listeners.clear()
