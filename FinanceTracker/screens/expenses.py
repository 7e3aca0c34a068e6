"""Expenses screen: month-scoped, searchable, category-filtered expense list."""
import dataclasses
import datetime
import logging
from typing import Any, Dict, List, Optional, Union

from PySide6 import QtCore

from .base import BaseScreen
from ..core.gateway import ExpenseGateway
from ..data import view
from ..data.entity import Category, DEFAULT_CATEGORY, Expense, default_currency
from ..data.model import ExpenseListModel


class ExpensesScreen(BaseScreen):
    """Expenses list with month, search, category and sort-order filters.

    Signals:
        filterChanged (object): The new :class:`~FinanceTracker.data.view.ExpenseFilter`.
    """
    filterChanged = QtCore.Signal(object)

    entity_type = Expense
    collection_key = 'expenses'
    gateway_class = ExpenseGateway

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        sort_order = self._settings['sort_order'] or view.SortOrder.Newest
        self._filter = view.ExpenseFilter(
            month=view.first_of_month(datetime.date.today()),
            sort_order=view.SortOrder(sort_order),
        )

    def create_model(self) -> ExpenseListModel:
        return ExpenseListModel(locale=self._settings['locale'], parent=self)

    def form_defaults(self) -> Dict[str, Any]:
        return {
            'merchant': '',
            'amount': '',
            'currency': default_currency(),
            'date': datetime.date.today(),
            'category': DEFAULT_CATEGORY,
            'notes': '',
        }

    def derive(self, records: List[Expense]) -> List[Expense]:
        return view.derive_expenses(records, self._filter)

    def before_subscribe(self) -> None:
        self.subscription.set_month(self._filter.month)

    @property
    def filter(self) -> view.ExpenseFilter:
        return self._filter

    def _set_filter(self, **changes: Any) -> None:
        new_filter = dataclasses.replace(self._filter, **changes)
        if new_filter == self._filter:
            return
        self._filter = new_filter
        logging.debug(f'Expense filter changed: {new_filter}')
        self.filterChanged.emit(new_filter)
        self.refresh()

    def set_month(self, anchor: datetime.date) -> None:
        """Scope the list to the month containing ``anchor``."""
        month = view.first_of_month(anchor)
        if month == self._filter.month:
            return
        self._filter = dataclasses.replace(self._filter, month=month)
        self.filterChanged.emit(self._filter)
        if self._mounted:
            self.subscription.set_month(month)
        self.refresh()

    def next_month(self) -> None:
        self.set_month(view.shift_month(self._filter.month, 1))

    def previous_month(self) -> None:
        self.set_month(view.shift_month(self._filter.month, -1))

    def set_search_text(self, text: str) -> None:
        self._set_filter(search_text=text or '')

    def set_category(self, category: Optional[Union[Category, str]]) -> None:
        """Show only ``category``; None or an empty value shows every category.

        Raises:
            ValueError: If ``category`` is not a known category.
        """
        self._set_filter(category=Category(category) if category else None)

    def set_sort_order(self, sort_order: Union[view.SortOrder, str]) -> None:
        self._set_filter(sort_order=view.SortOrder(sort_order))

    def toggle_sort_order(self) -> None:
        if self._filter.sort_order == view.SortOrder.Newest:
            self.set_sort_order(view.SortOrder.Oldest)
        else:
            self.set_sort_order(view.SortOrder.Newest)
