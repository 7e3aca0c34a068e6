"""Live subscription to a user-scoped store collection.

:class:`SubscriptionManager` keeps at most one live query open. The query is
re-established whenever the user or the anchor month changes, and the previous
handle is always released first. Each query is tagged with a generation number;
callbacks carrying an old generation are dropped when they arrive, so a released
query can never overwrite the records of its successor.

Store callbacks may arrive on any thread. They are forwarded through queued Qt
signals to the thread the manager lives on.
"""
import datetime
import logging
from typing import Any, Dict, List, Optional

from PySide6 import QtCore

from .store import DocumentStore, Subscription
from ..status import status


class SubscriptionManager(QtCore.QObject):
    """Owns the live query and the raw documents of one screen.

    Signals:
        recordsChanged (object): The full list of current documents.
        loadingChanged (bool): True while waiting for the first snapshot of a query.
        errorOccurred (str): A user-facing message after a query failed.
    """
    recordsChanged = QtCore.Signal(object)
    loadingChanged = QtCore.Signal(bool)
    errorOccurred = QtCore.Signal(str)

    # Internal channel from store threads, (generation, payload)
    _snapshotReceived = QtCore.Signal(int, object)
    _errorReceived = QtCore.Signal(int, object)

    def __init__(self, store: DocumentStore, collection: str, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._store = store
        self._collection = collection

        self._user_id: Optional[str] = None
        self._month: Optional[datetime.date] = None
        self._handle: Optional[Subscription] = None
        self._generation: int = 0

        self._documents: List[Dict[str, Any]] = []
        self._loading: bool = False

        self._snapshotReceived.connect(self._on_snapshot)
        self._errorReceived.connect(self._on_error)

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def month(self) -> Optional[datetime.date]:
        return self._month

    @property
    def documents(self) -> List[Dict[str, Any]]:
        return list(self._documents)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def generation(self) -> int:
        return self._generation

    @QtCore.Slot(object)
    def set_user(self, user_id: Optional[str]) -> None:
        """Scope the subscription to ``user_id``; None releases it and clears the records."""
        user_id = user_id or None
        if user_id == self._user_id and (user_id is None or self.active):
            return

        changed = user_id != self._user_id
        self._user_id = user_id
        if changed:
            self._set_documents([])

        if user_id is None:
            self.release()
            self._set_loading(False)
            return
        self._subscribe()

    def set_month(self, month: datetime.date) -> None:
        """Record the anchor month and re-establish the subscription if it changed."""
        if month == self._month:
            return
        self._month = month
        if self._user_id is not None:
            self._subscribe()

    def release(self) -> None:
        """Release the current query, if any. Pending callbacks of it are discarded."""
        self._generation += 1
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.unsubscribe()
        except Exception as ex:
            logging.warning(f'Failed to release "{self._collection}" subscription: {ex}')
        logging.debug(f'Released "{self._collection}" subscription')

    def _subscribe(self) -> None:
        self.release()
        generation = self._generation
        self._set_loading(True)

        def on_change(docs: List[Dict[str, Any]]) -> None:
            self._snapshotReceived.emit(generation, list(docs))

        def on_error(error: Exception) -> None:
            self._errorReceived.emit(generation, error)

        logging.debug(f'Subscribing to "{self._collection}" for user "{self._user_id}" (generation {generation})')
        try:
            handle = self._store.subscribe(self._collection, self._user_id, on_change, on_error)
        except Exception as ex:
            self._on_error(generation, ex)
            return

        if generation != self._generation:
            # Re-scoped from within a callback while subscribing
            handle.unsubscribe()
            return
        self._handle = handle

    @QtCore.Slot(int, object)
    def _on_snapshot(self, generation: int, docs: List[Dict[str, Any]]) -> None:
        if generation != self._generation:
            logging.debug(f'Dropping stale "{self._collection}" snapshot (generation {generation})')
            return
        self._set_documents(docs)
        self._set_loading(False)

    @QtCore.Slot(int, object)
    def _on_error(self, generation: int, error: Exception) -> None:
        if generation != self._generation:
            logging.debug(f'Dropping stale "{self._collection}" error (generation {generation}): {error}')
            return

        # Records stay as they were; a stale list is better than an empty one
        ex = status.SubscriptionFailedException(f'{self._collection}: {error}')
        self._set_loading(False)
        self.errorOccurred.emit(str(ex))

    def _set_documents(self, docs: List[Dict[str, Any]]) -> None:
        self._documents = list(docs)
        self.recordsChanged.emit(list(self._documents))

    def _set_loading(self, value: bool) -> None:
        if value == self._loading:
            return
        self._loading = value
        self.loadingChanged.emit(value)
