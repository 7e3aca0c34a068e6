"""Document store access and background execution of store round-trips.

Provides the cached store client configured in the settings file, and the runners
that screens use to await store acknowledgements without blocking the event loop.

A runner is any callable ``runner(func, on_result, on_error)``: it calls ``func()``
and then exactly one of ``on_result(result)`` or ``on_error(exception)``.

- :func:`run_in_thread` runs ``func`` on an :class:`AsyncWorker` and delivers the
  outcome on the caller's thread through queued signals.
- :func:`run_inline` runs ``func`` synchronously.
"""

import logging
import time
from typing import Any, Callable, Optional, Set

from PySide6 import QtCore

from .store import DocumentStore, MemoryStore
from ..status import status

# Cached store client, one per app run
_cached_store: Optional[DocumentStore] = None

# Workers are kept alive here until they finish
_workers: Set['AsyncWorker'] = set()

Runner = Callable[[Callable[[], Any], Callable[[Any], None], Callable[[Exception], None]], Any]


class AsyncWorker(QtCore.QThread):
    """
    Worker thread that runs a blocking function, optionally retrying on failure.

    Status exceptions are never retried. Store mutations use a single attempt.

    Signals:
        resultReady (object): Emitted with the function's result on success.
        errorOccurred (object): Emitted with the exception on failure.
    """
    resultReady = QtCore.Signal(object)
    errorOccurred = QtCore.Signal(object)

    def __init__(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.func = func
        self.args = args

        self.max_attempts = kwargs.pop('max_attempts', 1)
        self.wait_seconds = kwargs.pop('wait_seconds', 1.0)
        self.kwargs = kwargs

    def run(self) -> None:
        attempts = 0
        last_exception = None
        while attempts < self.max_attempts:
            attempts += 1
            try:
                result = self.func(*self.args, **self.kwargs)
                self.resultReady.emit(result)
                return
            except status.BaseStatusException as ex:
                self.errorOccurred.emit(ex)
                return
            except Exception as ex:
                logging.debug(f'Attempt {attempts}/{self.max_attempts} failed: {ex}')
                last_exception = ex
                if attempts < self.max_attempts:
                    time.sleep(self.wait_seconds)
        self.errorOccurred.emit(last_exception)


class _Delivery(QtCore.QObject):
    """Receives worker outcomes on the thread it was created on."""

    def __init__(self, on_result: Callable[[Any], None], on_error: Callable[[Exception], None]) -> None:
        super().__init__()
        self._on_result = on_result
        self._on_error = on_error

    @QtCore.Slot(object)
    def deliver_result(self, result: Any) -> None:
        self._on_result(result)

    @QtCore.Slot(object)
    def deliver_error(self, error: Exception) -> None:
        self._on_error(error)


def run_in_thread(func: Callable[[], Any], on_result: Callable[[Any], None],
                  on_error: Callable[[Exception], None]) -> AsyncWorker:
    """Run ``func`` on a worker thread and report back on the calling thread.

    The calling thread must run a Qt event loop for the outcome to be delivered.

    Returns:
        AsyncWorker: The started worker.
    """
    worker = AsyncWorker(func)
    delivery = _Delivery(on_result, on_error)
    worker.resultReady.connect(delivery.deliver_result)
    worker.errorOccurred.connect(delivery.deliver_error)

    # Keep the delivery object alive for as long as the worker
    worker.delivery = delivery
    _workers.add(worker)

    def _cleanup() -> None:
        _workers.discard(worker)
        worker.deleteLater()

    worker.finished.connect(_cleanup)
    worker.start()
    return worker


def run_inline(func: Callable[[], Any], on_result: Callable[[Any], None],
               on_error: Callable[[Exception], None]) -> None:
    """Run ``func`` synchronously and report its outcome."""
    try:
        result = func()
    except Exception as ex:
        on_error(ex)
        return
    on_result(result)


def clear_store() -> None:
    """
    Closes and forgets the cached store client.
    """
    global _cached_store

    if _cached_store is not None:
        _cached_store.close()
    _cached_store = None


def get_store() -> DocumentStore:
    """
    Builds (or returns cached) the document store configured in the settings.

    Returns:
        DocumentStore: A :class:`MemoryStore` or a Firestore-backed store.

    Raises:
        status.CredsNotFoundException, status.CredsInvalidException: If the Firestore
            credentials cannot be loaded.
        status.StoreUnavailableException: If the Firestore client cannot be created.
    """
    global _cached_store
    if _cached_store is not None:
        return _cached_store

    from ..settings import lib
    config = lib.settings.get_section('store')
    backend = config.get('backend', 'memory')

    if backend == 'memory':
        _cached_store = MemoryStore()
        logging.debug('Using in-memory document store.')
        return _cached_store

    from . import auth
    from .firestore import FirestoreStore

    creds = auth.get_creds()
    try:
        _cached_store = FirestoreStore(project=config.get('project'), credentials=creds)
    except Exception as ex:
        raise status.StoreUnavailableException(str(ex)) from ex
    logging.debug('Firestore document store client created successfully.')
    return _cached_store


@QtCore.Slot(str)
def _on_config_section_changed(section: str) -> None:
    if section == 'store':
        clear_store()


def _connect_signals() -> None:
    from ..ui.actions import signals
    signals.configSectionChanged.connect(_on_config_section_changed)


_connect_signals()
