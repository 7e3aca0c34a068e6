"""Validated create, update and delete operations against a store collection.

Gateways never touch local record state: a successful mutation becomes visible
only when the store pushes the next snapshot to the screen's subscription.

Validation happens before any store call and raises
:class:`~FinanceTracker.status.status.ValidationException`. Store failures are
wrapped in :class:`~FinanceTracker.status.status.MutationFailedException`.
Deleting a document that no longer exists succeeds.
"""
import datetime
import logging
import math
from typing import Any, Dict, Optional

from .store import DocumentNotFoundError, DocumentStore
from ..data.entity import Category, DEFAULT_CATEGORY, default_currency, to_date, utc_now_iso
from ..status import status

# Fields the store owns; never accepted from callers
PROTECTED_FIELDS = ('id', 'userId', 'createdAt')


def parse_amount(value: Any, field: str, allow_zero: bool = False) -> float:
    """Parse a user-entered amount.

    Args:
        value: A number or a numeric string.
        field: Field name reported on failure.
        allow_zero: Accept ``0`` (for amounts that may be zero, e.g. saved so far).

    Raises:
        status.ValidationException: If the value is not a finite number, is negative,
            or is zero while ``allow_zero`` is False.
    """
    if isinstance(value, bool):
        raise status.ValidationException('Please enter a valid amount.', field=field)
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise status.ValidationException('Please enter a valid amount.', field=field)

    if not math.isfinite(amount):
        raise status.ValidationException('Please enter a valid amount.', field=field)
    if amount < 0 or (amount == 0 and not allow_zero):
        raise status.ValidationException('Please enter an amount greater than 0.', field=field)
    return amount


def require_text(value: Any, field: str, label: str) -> str:
    text = str(value).strip() if value is not None else ''
    if not text:
        raise status.ValidationException(f'Please fill in the {label}.', field=field)
    return text


def parse_date(value: Any, field: str) -> datetime.date:
    try:
        return to_date(value)
    except ValueError:
        raise status.ValidationException('Please pick a valid date.', field=field)


def parse_currency(value: Any) -> str:
    symbol = str(value).strip() if value is not None else ''
    return symbol or default_currency()


def parse_notes(value: Any) -> str:
    return str(value).strip() if value is not None else ''


def validate_expense(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate staged expense fields and return the document fields to store.

    Raises:
        status.ValidationException: On the first invalid field.
    """
    merchant = require_text(fields.get('merchant'), 'merchant', 'merchant')
    amount = parse_amount(fields.get('amount'), 'amount')
    date = parse_date(fields.get('date'), 'date')

    category = fields.get('category') or DEFAULT_CATEGORY
    try:
        category = Category(category)
    except ValueError:
        raise status.ValidationException(f'Unknown category "{category}".', field='category')

    return {
        'merchant': merchant,
        'amount': amount,
        'currency': parse_currency(fields.get('currency')),
        'date': date.isoformat(),
        'category': str(category),
        'notes': parse_notes(fields.get('notes')),
    }


def validate_goal(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate staged goal fields and return the document fields to store.

    An empty ``currentAmount`` counts as nothing saved yet.

    Raises:
        status.ValidationException: On the first invalid field.
    """
    title = require_text(fields.get('title'), 'title', 'title')
    target = parse_amount(fields.get('targetAmount'), 'targetAmount')

    current = fields.get('currentAmount')
    if current is None or (isinstance(current, str) and not current.strip()):
        current = 0.0
    current = parse_amount(current, 'currentAmount', allow_zero=True)

    start = parse_date(fields.get('startDate'), 'startDate')
    end = parse_date(fields.get('endDate'), 'endDate')
    if start > end:
        raise status.ValidationException('Start date cannot be after end date.', field='endDate')

    return {
        'title': title,
        'targetAmount': target,
        'currentAmount': current,
        'startDate': start.isoformat(),
        'endDate': end.isoformat(),
        'currency': parse_currency(fields.get('currency')),
        'notes': parse_notes(fields.get('notes')),
    }


class MutationGateway:
    """Create, update and delete documents of one collection on behalf of the session user.

    Args:
        store: The document store.
        collection: Collection name.
        session: Object exposing the signed-in ``user_id`` (None when signed out).
    """
    entity_name = 'record'

    def __init__(self, store: DocumentStore, collection: str, session: Any) -> None:
        self._store = store
        self._collection = collection
        self._session = session

    @property
    def collection(self) -> str:
        return self._collection

    def validate(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def _require_user(self) -> str:
        user_id: Optional[str] = self._session.user_id
        if not user_id:
            raise status.NotAuthenticatedException
        return user_id

    @staticmethod
    def _editable(fields: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}

    def create(self, fields: Dict[str, Any]) -> str:
        """Validate and add a new document owned by the session user.

        Returns:
            str: The id assigned by the store.

        Raises:
            status.ValidationException: If the fields are invalid.
            status.NotAuthenticatedException: If nobody is signed in.
            status.MutationFailedException: If the store rejects the document.
        """
        document = self.validate(self._editable(fields))
        document['userId'] = self._require_user()
        document['createdAt'] = utc_now_iso()

        try:
            record_id = self._store.create(self._collection, document)
        except Exception as ex:
            raise status.MutationFailedException(f'Failed to add {self.entity_name}: {ex}') from ex

        logging.info(f'Created {self.entity_name} "{record_id}" in "{self._collection}"')
        return record_id

    def update(self, record_id: str, fields: Dict[str, Any]) -> str:
        """Validate and replace every editable field of an existing document.

        Returns:
            str: ``record_id``.

        Raises:
            status.ValidationException: If the fields are invalid.
            status.NotAuthenticatedException: If nobody is signed in.
            status.MutationFailedException: If the store rejects the update or the
                document does not exist.
        """
        document = self.validate(self._editable(fields))
        self._require_user()

        try:
            self._store.update(self._collection, record_id, document)
        except Exception as ex:
            raise status.MutationFailedException(f'Failed to update {self.entity_name}: {ex}') from ex

        logging.info(f'Updated {self.entity_name} "{record_id}" in "{self._collection}"')
        return record_id

    def delete(self, record_id: str) -> str:
        """Remove a document. A document that is already gone counts as deleted.

        Returns:
            str: ``record_id``.

        Raises:
            status.NotAuthenticatedException: If nobody is signed in.
            status.MutationFailedException: If the store rejects the delete.
        """
        self._require_user()
        try:
            self._store.delete(self._collection, record_id)
        except DocumentNotFoundError:
            logging.debug(f'{self.entity_name.capitalize()} "{record_id}" was already deleted')
            return record_id
        except Exception as ex:
            raise status.MutationFailedException(f'Failed to delete {self.entity_name}: {ex}') from ex

        logging.info(f'Deleted {self.entity_name} "{record_id}" from "{self._collection}"')
        return record_id


class ExpenseGateway(MutationGateway):
    entity_name = 'expense'

    def validate(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return validate_expense(fields)


class GoalGateway(MutationGateway):
    entity_name = 'goal'

    def validate(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return validate_goal(fields)
