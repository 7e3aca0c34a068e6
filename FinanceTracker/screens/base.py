"""Shared screen controller: subscription, derived view, form and detail actions.

A screen owns its raw record set exclusively. The record set only ever changes
through the subscription, never through the screen's own mutations.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from PySide6 import QtCore

from ..core import service
from ..core.store import DocumentStore
from ..core.subscription import SubscriptionManager
from ..data.entity import parse_documents
from ..status import status
from .form import FormController


def confirm_delete(record: Any) -> bool:
    """Ask the user to confirm a delete with a modal message box."""
    from PySide6 import QtWidgets

    name = getattr(record, 'title', None) or getattr(record, 'merchant', None) or 'this record'
    answer = QtWidgets.QMessageBox.question(
        None,
        'Delete',
        f'Are you sure you want to delete {name}? This cannot be undone.',
        QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.Cancel,
        QtWidgets.QMessageBox.Cancel,
    )
    return answer == QtWidgets.QMessageBox.Yes


class BaseScreen(QtCore.QObject):
    """Base class of the expenses and goals screens.

    Args:
        store: The document store.
        session: The session providing ``user_id`` and ``userChanged``.
        confirm: Called with the record before a delete; returns True to proceed.
        runner: Runs store calls, see :mod:`FinanceTracker.core.service`.
        collection: Collection name; read from the settings when omitted.
        settings: Settings API; defaults to the application settings.

    Signals:
        viewChanged (object): The derived view after any record or filter change.
        loadingChanged (bool): True while waiting for the first snapshot.
        errorOccurred (str): A user-facing failure message. Every failure of the
            screen is emitted exactly once here, including the ones that also
            reached ``signals.error`` as a status exception.
        deleted (str): The id of a record the store confirmed deleting.
    """
    viewChanged = QtCore.Signal(object)
    loadingChanged = QtCore.Signal(bool)
    errorOccurred = QtCore.Signal(str)
    deleted = QtCore.Signal(str)

    entity_type: type = None
    collection_key: str = None
    gateway_class: type = None

    def __init__(self, store: DocumentStore, session: Any, confirm: Optional[Callable[[Any], bool]] = None,
                 runner: Optional[service.Runner] = None, collection: Optional[str] = None,
                 settings: Any = None, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)

        if settings is None:
            from ..settings import lib
            settings = lib.settings
        self._settings = settings
        self._session = session
        self._confirm = confirm or confirm_delete
        self._runner = runner or service.run_in_thread

        collection = collection or settings.get_section('collections')[self.collection_key]

        self.subscription = SubscriptionManager(store, collection, parent=self)
        self.gateway = self.gateway_class(store, collection, session)
        self.form = FormController(self.gateway, self.form_defaults, runner=self._runner, parent=self)
        self.model = self.create_model()

        self._records: List[Any] = []
        self._view: List[Any] = []
        self._pending: Set[str] = set()
        self._mounted: bool = False

        self._connect_signals()

    def _connect_signals(self) -> None:
        self.subscription.recordsChanged.connect(self._on_records_changed)
        self.subscription.loadingChanged.connect(self.loadingChanged)
        self.subscription.errorOccurred.connect(self.errorOccurred)
        self.form.failed.connect(self.errorOccurred)

        self.viewChanged.connect(self.model.set_records)
        self.loadingChanged.connect(self.model.set_loading)

    def create_model(self) -> QtCore.QAbstractListModel:
        raise NotImplementedError

    def form_defaults(self) -> Dict[str, Any]:
        raise NotImplementedError

    def derive(self, records: List[Any]) -> List[Any]:
        raise NotImplementedError

    def before_subscribe(self) -> None:
        """Hook to prime the subscription before the first query opens."""

    @property
    def records(self) -> List[Any]:
        return list(self._records)

    @property
    def view(self) -> List[Any]:
        return list(self._view)

    @property
    def loading(self) -> bool:
        return self.subscription.loading

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        """Start following the session and open the live query."""
        if self._mounted:
            return
        self._mounted = True
        self._session.userChanged.connect(self._on_user_changed)
        self.before_subscribe()
        self.subscription.set_user(self._session.user_id)

    def unmount(self) -> None:
        """Release the live query and stop following the session."""
        if not self._mounted:
            return
        self._mounted = False
        self._session.userChanged.disconnect(self._on_user_changed)
        self.subscription.release()
        self.form.close()

    @QtCore.Slot(object)
    def _on_user_changed(self, user_id: Optional[str]) -> None:
        self.form.close()
        self.subscription.set_user(user_id)

    @QtCore.Slot(object)
    def _on_records_changed(self, docs: List[Dict[str, Any]]) -> None:
        self._records = parse_documents(docs, self.entity_type)
        self.refresh()

    def refresh(self) -> None:
        """Recompute the derived view from the current records and filters."""
        self._view = self.derive(self._records)
        self.viewChanged.emit(list(self._view))

    def find(self, record_id: str) -> Optional[Any]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def add(self) -> bool:
        return self.form.open_add()

    def edit(self, record_id: str) -> bool:
        """Open the form on a record of the live record set."""
        record = self.find(record_id)
        if record is None:
            logging.warning(f'Cannot edit unknown record "{record_id}"')
            self.errorOccurred.emit('This record no longer exists.')
            return False
        return self.form.open_edit(record_id, record.to_fields())

    def delete(self, record_id: str) -> bool:
        """Ask for confirmation, then delete the record.

        Returns:
            bool: True if the delete was started.
        """
        if record_id in self._pending:
            return False
        record = self.find(record_id)
        if record is None:
            logging.warning(f'Cannot delete unknown record "{record_id}"')
            self.errorOccurred.emit('This record no longer exists.')
            return False
        if not self._confirm(record):
            logging.debug(f'Delete of "{record_id}" cancelled')
            return False

        def on_result(_: Any) -> None:
            self._pending.discard(record_id)
            if self.form.editing_id == record_id:
                self.form.close()
            self.deleted.emit(record_id)

        self._run(record_id, lambda: self.gateway.delete(record_id), on_result)
        return True

    def _run(self, record_id: str, func: Callable[[], Any], on_result: Callable[[Any], None]) -> None:
        self._pending.add(record_id)

        def on_error(error: Exception) -> None:
            self._pending.discard(record_id)
            if not isinstance(error, status.BaseStatusException):
                error = status.MutationFailedException(str(error))
            self.errorOccurred.emit(error.message)

        self._runner(func, on_result, on_error)
