"""
Tests for FinanceTracker.core.gateway: validation and store mutations.

Run with:
    python -m unittest tests.test_gateway
"""
import datetime

from FinanceTracker.core import gateway
from FinanceTracker.core.gateway import ExpenseGateway, GoalGateway
from FinanceTracker.core.store import DocumentNotFoundError
from FinanceTracker.status import status
from tests.base import BaseTestCase, FakeSession, FakeStore, mute_ui_signals


def expense_fields(**overrides):
    fields = {
        'merchant': 'Starbucks',
        'amount': '4.50',
        'currency': '$',
        'date': datetime.date(2024, 3, 15),
        'category': 'food',
        'notes': '',
    }
    fields.update(overrides)
    return fields


def goal_fields(**overrides):
    fields = {
        'title': 'Bike',
        'targetAmount': '800',
        'currentAmount': '200',
        'startDate': '2024-01-01',
        'endDate': '2024-12-31',
        'currency': '€',
        'notes': '',
    }
    fields.update(overrides)
    return fields


class ParseAmountTest(BaseTestCase):
    def test_valid(self):
        self.assertEqual(gateway.parse_amount('12.5', 'amount'), 12.5)
        self.assertEqual(gateway.parse_amount(' 3 ', 'amount'), 3.0)
        self.assertEqual(gateway.parse_amount(7, 'amount'), 7.0)

    def test_invalid(self):
        for value in ('', 'abc', None, 'nan', 'inf', True, -1, '-0.5', 0, '0'):
            with self.subTest(value=value):
                with mute_ui_signals(), self.assertRaises(status.ValidationException) as cm:
                    gateway.parse_amount(value, 'amount')
                self.assertEqual(cm.exception.field, 'amount')

    def test_zero_allowed(self):
        self.assertEqual(gateway.parse_amount('0', 'currentAmount', allow_zero=True), 0.0)


class ValidateExpenseTest(BaseTestCase):
    def test_valid(self):
        doc = gateway.validate_expense(expense_fields(merchant='  Starbucks ', notes=' latte '))
        self.assertEqual(doc, {
            'merchant': 'Starbucks',
            'amount': 4.5,
            'currency': '$',
            'date': '2024-03-15',
            'category': 'food',
            'notes': 'latte',
        })

    def test_empty_currency_uses_default(self):
        self.assertEqual(gateway.validate_expense(expense_fields(currency=''))['currency'], '$')

    def test_missing_category_uses_default(self):
        self.assertEqual(gateway.validate_expense(expense_fields(category=None))['category'], 'food')

    def test_invalid_fields(self):
        cases = {
            'merchant': expense_fields(merchant='   '),
            'amount': expense_fields(amount='0'),
            'date': expense_fields(date='someday'),
            'category': expense_fields(category='rent'),
        }
        for field, fields in cases.items():
            with self.subTest(field=field):
                with mute_ui_signals(), self.assertRaises(status.ValidationException) as cm:
                    gateway.validate_expense(fields)
                self.assertEqual(cm.exception.field, field)


class ValidateGoalTest(BaseTestCase):
    def test_valid(self):
        doc = gateway.validate_goal(goal_fields())
        self.assertEqual(doc['targetAmount'], 800.0)
        self.assertEqual(doc['currentAmount'], 200.0)
        self.assertEqual(doc['startDate'], '2024-01-01')
        self.assertEqual(doc['currency'], '€')

    def test_empty_current_amount_is_zero(self):
        self.assertEqual(gateway.validate_goal(goal_fields(currentAmount=''))['currentAmount'], 0.0)
        self.assertEqual(gateway.validate_goal(goal_fields(currentAmount=None))['currentAmount'], 0.0)

    def test_same_start_and_end(self):
        doc = gateway.validate_goal(goal_fields(startDate='2024-05-01', endDate='2024-05-01'))
        self.assertEqual(doc['endDate'], '2024-05-01')

    def test_start_after_end(self):
        with mute_ui_signals(), self.assertRaises(status.ValidationException) as cm:
            gateway.validate_goal(goal_fields(startDate='2024-06-01', endDate='2024-05-01'))
        self.assertEqual(cm.exception.field, 'endDate')

    def test_zero_target_rejected(self):
        with mute_ui_signals(), self.assertRaises(status.ValidationException) as cm:
            gateway.validate_goal(goal_fields(targetAmount=0))
        self.assertEqual(cm.exception.field, 'targetAmount')

    def test_negative_current_rejected(self):
        with mute_ui_signals(), self.assertRaises(status.ValidationException):
            gateway.validate_goal(goal_fields(currentAmount='-1'))


class MutationGatewayTest(BaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = FakeStore()
        self.session = FakeSession('alice')
        self.expenses = ExpenseGateway(self.store, 'expenses', self.session)
        self.goals = GoalGateway(self.store, 'goals', self.session)

    def test_create_sets_owner_and_timestamp(self):
        record_id = self.expenses.create(expense_fields(id='forged', userId='mallory', createdAt='1999'))

        self.assertEqual(record_id, 'doc-1')
        collection, doc = self.store.created[0]
        self.assertEqual(collection, 'expenses')
        self.assertEqual(doc['userId'], 'alice')
        self.assertNotEqual(doc['createdAt'], '1999')
        self.assertNotIn('id', doc)

    def test_invalid_input_makes_no_store_call(self):
        with mute_ui_signals():
            with self.assertRaises(status.ValidationException):
                self.expenses.create(expense_fields(amount='abc'))
            with self.assertRaises(status.ValidationException):
                self.goals.update('g1', goal_fields(title=''))
        self.assertEqual(self.store.mutation_count, 0)

    def test_signed_out(self):
        self.session.user_id = None
        with mute_ui_signals():
            for call in (lambda: self.expenses.create(expense_fields()),
                         lambda: self.expenses.update('e1', expense_fields()),
                         lambda: self.expenses.delete('e1')):
                with self.assertRaises(status.NotAuthenticatedException):
                    call()
        self.assertEqual(self.store.mutation_count, 0)

    def test_update_writes_every_editable_field(self):
        self.assertEqual(self.goals.update('g1', goal_fields(userId='mallory')), 'g1')
        collection, record_id, doc = self.store.updated[0]
        self.assertEqual((collection, record_id), ('goals', 'g1'))
        self.assertEqual(
            set(doc),
            {'title', 'targetAmount', 'currentAmount', 'startDate', 'endDate', 'currency', 'notes'},
        )

    def test_delete_of_missing_record_succeeds(self):
        self.store.fail['delete'] = DocumentNotFoundError('expenses', 'gone')
        self.assertEqual(self.expenses.delete('gone'), 'gone')

    def test_store_failures_are_wrapped(self):
        self.store.fail['create'] = RuntimeError('offline')
        self.store.fail['update'] = DocumentNotFoundError('expenses', 'e1')
        self.store.fail['delete'] = PermissionError('denied')

        with mute_ui_signals():
            with self.assertRaises(status.MutationFailedException) as cm:
                self.expenses.create(expense_fields())
            self.assertIn('offline', str(cm.exception))

            with self.assertRaises(status.MutationFailedException):
                self.expenses.update('e1', expense_fields())
            with self.assertRaises(status.MutationFailedException):
                self.expenses.delete('e1')
