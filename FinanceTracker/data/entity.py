"""Record shapes persisted in the document store.

:class:`Expense` and :class:`Goal` are immutable snapshots of store documents. The
store's own field names are camelCase (``userId``, ``targetAmount``...);
:meth:`from_document` and :meth:`to_document` translate between the two.

Categories are a closed :class:`Category` enum backed by the :data:`CATEGORY_INFO`
display table. Currencies are configured in the settings file; :func:`get_currencies`
reads them and :func:`default_currency` returns the first symbol.
"""
import dataclasses
import datetime
import enum
import logging
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser


class Category(enum.StrEnum):
    """Expense categories, in display order. The first member is the default."""
    Food = 'food'
    Transport = 'transport'
    Shopping = 'shopping'
    Entertainment = 'entertainment'
    Bills = 'bills'
    Health = 'health'
    Travel = 'travel'
    Education = 'education'
    Other = 'other'


@dataclasses.dataclass(frozen=True)
class CategoryInfo:
    display_name: str
    icon: str


CATEGORY_INFO: Dict[Category, CategoryInfo] = {
    Category.Food: CategoryInfo('Food & Dining', 'restaurant'),
    Category.Transport: CategoryInfo('Transport', 'car'),
    Category.Shopping: CategoryInfo('Shopping', 'cart'),
    Category.Entertainment: CategoryInfo('Entertainment', 'film'),
    Category.Bills: CategoryInfo('Bills & Utilities', 'receipt'),
    Category.Health: CategoryInfo('Health', 'medkit'),
    Category.Travel: CategoryInfo('Travel', 'airplane'),
    Category.Education: CategoryInfo('Education', 'school'),
    Category.Other: CategoryInfo('Other', 'ellipsis-horizontal'),
}

DEFAULT_CATEGORY: Category = list(Category)[0]


@dataclasses.dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    label: str = ''


def get_currencies() -> List[Currency]:
    """Return the configured currencies, in order."""
    from ..settings import lib
    return [
        Currency(code=c['code'], symbol=c['symbol'], label=c.get('label', ''))
        for c in lib.settings.get_section('currencies')
    ]


def default_currency() -> str:
    """Return the symbol of the first configured currency."""
    return get_currencies()[0].symbol


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string, used for ``createdAt``."""
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def to_date(value: Any) -> datetime.date:
    """Coerce a date, datetime or ISO-8601 string to a calendar date.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date_parser.isoparse(value.strip()).date()
        except (ValueError, OverflowError) as ex:
            raise ValueError(f'Invalid ISO-8601 date: "{value}"') from ex
    raise ValueError(f'Invalid date: {value!r}')


def to_iso_string(value: Any) -> str:
    """Return a stored date as an ISO-8601 string, keeping any time and offset.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    to_date(value)
    if isinstance(value, datetime.date):
        return value.isoformat()
    return value.strip()


@dataclasses.dataclass(frozen=True)
class Expense:
    id: str
    user_id: str
    merchant: str
    amount: float
    currency: str
    date: str
    category: Category
    notes: str = ''
    created_at: str = ''

    @property
    def category_info(self) -> CategoryInfo:
        return CATEGORY_INFO[self.category]

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'Expense':
        """Create an Expense from a store snapshot document.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a field has an invalid value.
        """
        return cls(
            id=str(doc['id']),
            user_id=str(doc['userId']),
            merchant=str(doc['merchant']),
            amount=float(doc['amount']),
            currency=str(doc.get('currency') or ''),
            date=to_iso_string(doc['date']),
            category=Category(doc.get('category') or DEFAULT_CATEGORY),
            notes=str(doc.get('notes') or ''),
            created_at=str(doc.get('createdAt') or ''),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'merchant': self.merchant,
            'amount': self.amount,
            'currency': self.currency,
            'date': self.date,
            'category': str(self.category),
            'notes': self.notes,
            'createdAt': self.created_at,
        }

    def to_fields(self) -> Dict[str, Any]:
        """Return the editable fields, as staged by the edit form."""
        return {
            'merchant': self.merchant,
            'amount': self.amount,
            'currency': self.currency,
            'date': to_date(self.date),
            'category': self.category,
            'notes': self.notes,
        }


@dataclasses.dataclass(frozen=True)
class Goal:
    id: str
    user_id: str
    title: str
    target_amount: float
    current_amount: float
    start_date: str
    end_date: str
    currency: str
    notes: str = ''
    created_at: str = ''

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'Goal':
        """Create a Goal from a store snapshot document.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a field has an invalid value.
        """
        return cls(
            id=str(doc['id']),
            user_id=str(doc['userId']),
            title=str(doc['title']),
            target_amount=float(doc['targetAmount']),
            current_amount=float(doc.get('currentAmount') or 0.0),
            start_date=to_iso_string(doc['startDate']),
            end_date=to_iso_string(doc['endDate']),
            currency=str(doc.get('currency') or ''),
            notes=str(doc.get('notes') or ''),
            created_at=str(doc.get('createdAt') or ''),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'title': self.title,
            'targetAmount': self.target_amount,
            'currentAmount': self.current_amount,
            'startDate': self.start_date,
            'endDate': self.end_date,
            'currency': self.currency,
            'notes': self.notes,
            'createdAt': self.created_at,
        }

    def to_fields(self) -> Dict[str, Any]:
        """Return the editable fields, as staged by the edit form."""
        return {
            'title': self.title,
            'targetAmount': self.target_amount,
            'currentAmount': self.current_amount,
            'startDate': to_date(self.start_date),
            'endDate': to_date(self.end_date),
            'currency': self.currency,
            'notes': self.notes,
        }


def parse_documents(docs: List[Dict[str, Any]], entity_type: type) -> List[Any]:
    """Convert snapshot documents to entities, skipping malformed documents.

    Args:
        docs: Snapshot documents, each carrying its ``id``.
        entity_type: :class:`Expense` or :class:`Goal`.

    Returns:
        The parsed entities, in snapshot order.
    """
    records: List[Any] = []
    for doc in docs:
        try:
            records.append(entity_type.from_document(doc))
        except (KeyError, ValueError, TypeError) as ex:
            doc_id: Optional[str] = doc.get('id') if isinstance(doc, dict) else None
            logging.warning(f'Skipping malformed {entity_type.__name__} document "{doc_id}": {ex}')
    return records
