"""
List models for the expenses and goals views.

The models hold the derived view of a screen; they never filter or sort on their
own. A model also tracks whether its screen is still waiting for the first
snapshot, so views can tell "no data yet" apart from "confirmed empty".
"""

import logging
from typing import Any, List, Optional

from PySide6 import QtCore

from . import view
from .entity import Expense, Goal
from ..settings import locale as fmt

# Custom roles
RecordRole = QtCore.Qt.UserRole + 1
IdRole = QtCore.Qt.UserRole + 2
AmountRole = QtCore.Qt.UserRole + 3
DateRole = QtCore.Qt.UserRole + 4
CategoryRole = QtCore.Qt.UserRole + 5
IconRole = QtCore.Qt.UserRole + 6
ProgressRole = QtCore.Qt.UserRole + 7
MilestoneRole = QtCore.Qt.UserRole + 8
RemainingRole = QtCore.Qt.UserRole + 9


class RecordListModel(QtCore.QAbstractListModel):
    """Base list model over a list of entities.

    Signals:
        loadingChanged (bool): Emitted when the loading state changes.
    """
    loadingChanged = QtCore.Signal(bool)

    def __init__(self, locale: str = fmt.DEFAULT_LOCALE, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._records: List[Any] = []
        self._loading: bool = False
        self._locale = locale

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._records)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid():
            return None
        row = index.row()
        if row < 0 or row >= len(self._records):
            return None

        record = self._records[row]
        if role == RecordRole:
            return record
        if role == IdRole:
            return record.id
        return self.record_data(record, role)

    def record_data(self, record: Any, role: int) -> Any:
        return None

    def roleNames(self) -> dict:
        names = super().roleNames()
        names.update({
            RecordRole: b'record',
            IdRole: b'recordId',
            AmountRole: b'amount',
            DateRole: b'date',
            CategoryRole: b'category',
            IconRole: b'icon',
            ProgressRole: b'progress',
            MilestoneRole: b'milestone',
            RemainingRole: b'remaining',
        })
        return names

    @QtCore.Slot(object)
    def set_records(self, records: List[Any]) -> None:
        self.beginResetModel()
        self._records = list(records)
        self.endResetModel()
        logging.debug(f'{self.__class__.__name__}: {len(self._records)} row(s)')

    @QtCore.Slot(bool)
    def set_loading(self, value: bool) -> None:
        if value == self._loading:
            return
        self._loading = value
        self.loadingChanged.emit(value)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_empty(self) -> bool:
        """True only when the list is known to be empty, not while loading."""
        return not self._loading and not self._records

    def record(self, row: int) -> Any:
        return self._records[row]

    def row_of(self, record_id: str) -> int:
        for row, record in enumerate(self._records):
            if record.id == record_id:
                return row
        return -1


class ExpenseListModel(RecordListModel):
    """Rows of :class:`Expense` records."""

    def record_data(self, record: Expense, role: int) -> Any:
        if role == QtCore.Qt.DisplayRole:
            return record.merchant
        if role == AmountRole:
            return fmt.format_amount(record.amount, record.currency, self._locale)
        if role == DateRole:
            return fmt.format_iso_date(record.date, self._locale)
        if role == CategoryRole:
            return record.category_info.display_name
        if role == IconRole:
            return record.category_info.icon
        if role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            return record.notes or None
        return None


class GoalListModel(RecordListModel):
    """Rows of :class:`Goal` records with progress and milestone roles."""

    def __init__(self, milestone_threshold: float = view.MILESTONE_THRESHOLD, locale: str = fmt.DEFAULT_LOCALE,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(locale=locale, parent=parent)
        self._milestone_threshold = milestone_threshold

    def record_data(self, record: Goal, role: int) -> Any:
        if role == QtCore.Qt.DisplayRole:
            return record.title
        if role == ProgressRole:
            return view.goal_progress(record)
        if role == MilestoneRole:
            return view.is_milestone(view.goal_progress(record), self._milestone_threshold)
        if role == AmountRole:
            return fmt.format_amount(record.target_amount, record.currency, self._locale)
        if role == RemainingRole:
            return fmt.format_amount(view.remaining_amount(record), record.currency, self._locale)
        if role == DateRole:
            start = fmt.format_iso_date(record.start_date, self._locale)
            end = fmt.format_iso_date(record.end_date, self._locale)
            return f'{start} - {end}'
        if role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            return fmt.format_percent(view.goal_progress(record), self._locale)
        return None
