"""Add/edit form state machine.

States::

    Closed -> Adding  -> Submitting -> Closed
    Closed -> Editing -> Submitting -> Closed

A failed submission returns to the state it came from (Adding or Editing) with the
staged values untouched, so the user can retry. While Submitting, further submits,
field edits and close requests are ignored.
"""
import enum
import logging
from typing import Any, Callable, Dict, Optional

from PySide6 import QtCore

from ..core import service
from ..status import status


class FormState(enum.StrEnum):
    Closed = 'closed'
    Adding = 'adding'
    Editing = 'editing'
    Submitting = 'submitting'


class FormController(QtCore.QObject):
    """Stages form fields and submits them through a mutation gateway.

    Args:
        gateway: A :class:`~FinanceTracker.core.gateway.MutationGateway`.
        defaults: Returns the staged values of a new, empty form.
        runner: Runs the store call, see :mod:`FinanceTracker.core.service`.

    Signals:
        stateChanged (str): The new :class:`FormState`.
        busyChanged (bool): True while a submission awaits the store.
        fieldsChanged (object): A copy of the staged fields.
        submitted (str): The record id after a successful submission.
        failed (str): A user-facing message after validation or store failure.
    """
    stateChanged = QtCore.Signal(str)
    busyChanged = QtCore.Signal(bool)
    fieldsChanged = QtCore.Signal(object)
    submitted = QtCore.Signal(str)
    failed = QtCore.Signal(str)

    def __init__(self, gateway: Any, defaults: Callable[[], Dict[str, Any]],
                 runner: Optional[service.Runner] = None, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._gateway = gateway
        self._defaults = defaults
        self._runner = runner or service.run_in_thread

        self._state: FormState = FormState.Closed
        self._origin: Optional[FormState] = None
        self._editing_id: Optional[str] = None
        self._fields: Dict[str, Any] = {}

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state != FormState.Closed

    @property
    def busy(self) -> bool:
        return self._state == FormState.Submitting

    @property
    def editing_id(self) -> Optional[str]:
        return self._editing_id

    @property
    def fields(self) -> Dict[str, Any]:
        return dict(self._fields)

    def open_add(self) -> bool:
        """Open an empty form staged with the default values."""
        if self.busy:
            return False
        self._stage(None, self._defaults())
        self._set_state(FormState.Adding)
        return True

    def open_edit(self, record_id: str, fields: Dict[str, Any]) -> bool:
        """Open the form on an existing record, staged with its current values."""
        if self.busy:
            return False
        self._stage(record_id, fields)
        self._set_state(FormState.Editing)
        return True

    def set_field(self, name: str, value: Any) -> bool:
        if self._state not in (FormState.Adding, FormState.Editing):
            logging.debug(f'Ignoring "{name}" edit while the form is {self._state}')
            return False
        self._fields[name] = value
        self.fieldsChanged.emit(dict(self._fields))
        return True

    def submit(self) -> bool:
        """Validate and submit the staged fields.

        Returns:
            bool: True if the store call was started.
        """
        if self._state not in (FormState.Adding, FormState.Editing):
            logging.debug(f'Ignoring submit while the form is {self._state}')
            return False

        fields = dict(self._fields)
        try:
            self._gateway.validate(fields)
        except status.ValidationException as ex:
            self.failed.emit(ex.message)
            return False

        self._origin = self._state
        record_id = self._editing_id
        self._set_state(FormState.Submitting)

        if self._origin == FormState.Adding:
            func = lambda: self._gateway.create(fields)
        else:
            func = lambda: self._gateway.update(record_id, fields)

        self._runner(func, self._on_submit_result, self._on_submit_error)
        return True

    def close(self) -> bool:
        """Discard the staged fields and close. Ignored while submitting."""
        if self.busy:
            return False
        if self._state == FormState.Closed:
            return True
        self._stage(None, {})
        self._set_state(FormState.Closed)
        return True

    def _on_submit_result(self, record_id: Any) -> None:
        if self._state != FormState.Submitting:
            return
        self._origin = None
        self._stage(None, {})
        self._set_state(FormState.Closed)
        self.submitted.emit(str(record_id))

    def _on_submit_error(self, error: Exception) -> None:
        if self._state != FormState.Submitting:
            return
        if not isinstance(error, status.BaseStatusException):
            error = status.MutationFailedException(str(error))

        origin, self._origin = self._origin, None
        self._set_state(origin)
        self.failed.emit(error.message)

    def _stage(self, record_id: Optional[str], fields: Dict[str, Any]) -> None:
        self._editing_id = record_id
        self._fields = dict(fields)
        self.fieldsChanged.emit(dict(self._fields))

    def _set_state(self, state: FormState) -> None:
        if state == self._state:
            return
        was_busy = self.busy
        self._state = state
        self.stateChanged.emit(str(state))
        if was_busy != self.busy:
            self.busyChanged.emit(self.busy)
