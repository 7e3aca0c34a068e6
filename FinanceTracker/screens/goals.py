"""Goals screen: savings goals with progress, milestones and a detail view."""
import datetime
import logging
from typing import Any, Dict, List, Optional

from PySide6 import QtCore

from .base import BaseScreen
from ..core.gateway import GoalGateway, parse_amount
from ..data import view
from ..data.entity import Goal, default_currency
from ..data.model import GoalListModel
from ..status import status


class GoalsScreen(BaseScreen):
    """Savings goals list with a selected goal shown in detail.

    The selected goal is looked up by id in every new snapshot, so the detail view
    always shows the latest stored values. It is cleared when the goal disappears.

    Signals:
        selectedChanged (object): The selected :class:`Goal`, or None.
    """
    selectedChanged = QtCore.Signal(object)

    entity_type = Goal
    collection_key = 'goals'
    gateway_class = GoalGateway

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._selected_id: Optional[str] = None
        self._selected: Optional[Goal] = None

    def create_model(self) -> GoalListModel:
        return GoalListModel(
            milestone_threshold=self.milestone_threshold,
            locale=self._settings['locale'],
            parent=self,
        )

    @property
    def milestone_threshold(self) -> float:
        value = self._settings['milestone_threshold']
        return view.MILESTONE_THRESHOLD if value is None else float(value)

    def form_defaults(self) -> Dict[str, Any]:
        today = datetime.date.today()
        days = self._settings['goal_duration_days'] or 30
        return {
            'title': '',
            'targetAmount': '',
            'currentAmount': 0.0,
            'startDate': today,
            'endDate': today + datetime.timedelta(days=int(days)),
            'currency': default_currency(),
            'notes': '',
        }

    def derive(self, records: List[Goal]) -> List[Goal]:
        return view.derive_goals(records)

    def refresh(self) -> None:
        super().refresh()
        self._sync_selected()

    @property
    def selected(self) -> Optional[Goal]:
        return self._selected

    def select(self, goal_id: Optional[str]) -> bool:
        """Show ``goal_id`` in the detail view; None closes it.

        Returns:
            bool: False if the goal is not in the current records.
        """
        if goal_id is not None and self.find(goal_id) is None:
            logging.warning(f'Cannot select unknown goal "{goal_id}"')
            return False
        self._selected_id = goal_id
        self._sync_selected()
        return True

    def _sync_selected(self) -> None:
        goal = self.find(self._selected_id) if self._selected_id else None
        if goal is None:
            self._selected_id = None
        if goal == self._selected:
            return
        self._selected = goal
        self.selectedChanged.emit(goal)

    def progress(self, goal_id: str) -> float:
        goal = self.find(goal_id)
        return view.goal_progress(goal) if goal else 0.0

    def milestone(self, goal_id: str) -> bool:
        return view.is_milestone(self.progress(goal_id), self.milestone_threshold)

    def remaining(self, goal_id: str) -> float:
        goal = self.find(goal_id)
        return view.remaining_amount(goal) if goal else 0.0

    def add_funds(self, goal_id: str, amount: Any) -> bool:
        """Add ``amount`` to the goal's saved amount.

        The goal is written back in full with the new saved amount. The change shows
        up once the store delivers the next snapshot.

        Returns:
            bool: True if the update was started.
        """
        if goal_id in self._pending:
            return False

        goal = self.find(goal_id)
        if goal is None:
            self.errorOccurred.emit('This goal no longer exists.')
            return False

        try:
            value = parse_amount(amount, 'amount')
        except status.ValidationException as ex:
            self.errorOccurred.emit(ex.message)
            return False

        fields = goal.to_fields()
        fields['currentAmount'] = goal.current_amount + value

        def on_result(_: Any) -> None:
            self._pending.discard(goal_id)
            logging.info(f'Added {value} to goal "{goal_id}"')

        self._run(goal_id, lambda: self.gateway.update(goal_id, fields), on_result)
        return True
