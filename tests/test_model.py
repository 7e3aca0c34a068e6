"""
Tests for the expense and goal list models.

Run with:
    python -m unittest tests.test_model
"""
from PySide6 import QtCore

from FinanceTracker.data import model
from FinanceTracker.data.entity import Expense, Goal
from tests.base import BaseTestCase, SignalRecorder, expense_doc, goal_doc


class ExpenseListModelTest(BaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.model = model.ExpenseListModel()
        self.records = [
            Expense.from_document(expense_doc('e1', 'Starbucks', '2024-03-15', amount=1234.5, notes='latte')),
            Expense.from_document(expense_doc('e2', 'Taxi', '2024-03-10', category='transport')),
        ]

    def test_rows_and_roles(self):
        self.model.set_records(self.records)
        self.assertEqual(self.model.rowCount(), 2)

        index = self.model.index(0, 0)
        self.assertEqual(self.model.data(index), 'Starbucks')
        self.assertEqual(self.model.data(index, model.IdRole), 'e1')
        self.assertIs(self.model.data(index, model.RecordRole), self.records[0])
        self.assertEqual(self.model.data(index, model.AmountRole), '$1,234.50')
        self.assertEqual(self.model.data(index, model.DateRole), 'Mar 15, 2024')
        self.assertEqual(self.model.data(index, model.CategoryRole), 'Food & Dining')
        self.assertEqual(self.model.data(index, QtCore.Qt.ToolTipRole), 'latte')

        second = self.model.index(1, 0)
        self.assertEqual(self.model.data(second, model.CategoryRole), 'Transport')
        self.assertIsNone(self.model.data(second, QtCore.Qt.ToolTipRole))

    def test_invalid_index(self):
        self.assertIsNone(self.model.data(QtCore.QModelIndex()))
        self.assertEqual(self.model.rowCount(self.model.index(0, 0)), 0)

    def test_row_of(self):
        self.model.set_records(self.records)
        self.assertEqual(self.model.row_of('e2'), 1)
        self.assertEqual(self.model.row_of('nope'), -1)

    def test_loading_versus_empty(self):
        changes = SignalRecorder(self.model.loadingChanged)
        self.model.set_loading(True)
        self.model.set_loading(True)
        self.assertFalse(self.model.is_empty)
        self.assertEqual(changes.count, 1)

        self.model.set_loading(False)
        self.assertTrue(self.model.is_empty)

        self.model.set_records(self.records)
        self.assertFalse(self.model.is_empty)

    def test_role_names(self):
        names = self.model.roleNames()
        self.assertEqual(names[model.ProgressRole], b'progress')
        self.assertEqual(names[model.IdRole], b'recordId')


class GoalListModelTest(BaseTestCase):
    def test_roles(self):
        goals_model = model.GoalListModel()
        goals_model.set_records([
            Goal.from_document(goal_doc('g1', 'Bike', 800, 200)),
            Goal.from_document(goal_doc('g2', 'Car', 10000, 100)),
        ])

        bike = goals_model.index(0, 0)
        self.assertEqual(goals_model.data(bike), 'Bike')
        self.assertEqual(goals_model.data(bike, model.ProgressRole), 25.0)
        self.assertTrue(goals_model.data(bike, model.MilestoneRole))
        self.assertEqual(goals_model.data(bike, model.AmountRole), '$800.00')
        self.assertEqual(goals_model.data(bike, model.RemainingRole), '$600.00')
        self.assertEqual(goals_model.data(bike, model.DateRole), 'Jan 1, 2024 - Dec 31, 2024')
        self.assertEqual(goals_model.data(bike, QtCore.Qt.ToolTipRole), '25%')

        car = goals_model.index(1, 0)
        self.assertEqual(goals_model.data(car, model.ProgressRole), 1.0)
        self.assertFalse(goals_model.data(car, model.MilestoneRole))

    def test_custom_threshold(self):
        goals_model = model.GoalListModel(milestone_threshold=50.0)
        goals_model.set_records([Goal.from_document(goal_doc('g1', 'Bike', 800, 200))])
        self.assertFalse(goals_model.data(goals_model.index(0, 0), model.MilestoneRole))
