"""Derived views: the filtered and ordered record lists that screens render.

Everything here is a pure function of its inputs: records are never mutated, no
settings are read and no I/O happens, so the functions can run on every refresh.

Expense views are computed in a fixed order:

1. keep records dated within the anchor month, first day 00:00:00 to last day
   23:59:59, both ends inclusive
2. keep records whose merchant or notes contain the search text, case-insensitively
3. keep records of the selected category
4. order newest first; the oldest-first order is the exact reverse of that list,
   so records sharing a date keep a stable relative order in both directions
"""
import dataclasses
import datetime
import enum
import math
from typing import List, Optional, Sequence, Tuple

import pandas as pd
from dateutil.relativedelta import relativedelta

from .entity import Category, Expense, Goal

MILESTONE_THRESHOLD: float = 25.0


class SortOrder(enum.StrEnum):
    Newest = 'newest'
    Oldest = 'oldest'


@dataclasses.dataclass(frozen=True)
class ExpenseFilter:
    """Filter state of the expenses screen."""
    month: datetime.date
    search_text: str = ''
    category: Optional[Category] = None
    sort_order: SortOrder = SortOrder.Newest


def first_of_month(anchor: datetime.date) -> datetime.date:
    if isinstance(anchor, datetime.datetime):
        anchor = anchor.date()
    return anchor.replace(day=1)


def shift_month(anchor: datetime.date, months: int) -> datetime.date:
    """Return the first day of the month ``months`` away from ``anchor``."""
    return first_of_month(anchor) + relativedelta(months=months)


def month_window(anchor: datetime.date) -> Tuple[datetime.datetime, datetime.datetime]:
    """Return the inclusive ``(start, end)`` bounds of the month containing ``anchor``.

    Example:
        >>> month_window(datetime.date(2024, 2, 10))
        (datetime.datetime(2024, 2, 1, 0, 0), datetime.datetime(2024, 2, 29, 23, 59, 59))
    """
    start = datetime.datetime.combine(first_of_month(anchor), datetime.time.min)
    end = start + relativedelta(months=1) - relativedelta(seconds=1)
    return start, end


def _expense_frame(records: Sequence[Expense]) -> pd.DataFrame:
    # Rows are addressed by their position in ``records``
    when = pd.to_datetime(
        pd.Series([r.date for r in records], dtype=object),
        format='ISO8601',
        utc=True,
        errors='coerce',
    ).dt.tz_convert(None)
    return pd.DataFrame({
        'when': when,
        'merchant': pd.Series([r.merchant or '' for r in records], dtype=object),
        'notes': pd.Series([r.notes or '' for r in records], dtype=object),
        'category': pd.Series([str(r.category) for r in records], dtype=object),
    })


def derive_expenses(records: Sequence[Expense], flt: ExpenseFilter) -> List[Expense]:
    """Apply the month window, search, category filter and sort order.

    Args:
        records: Raw records as delivered by the subscription.
        flt: The current filter state.

    Returns:
        A new list of the visible records, in display order.
    """
    if not records:
        return []

    df = _expense_frame(records)

    start, end = month_window(flt.month)
    df = df[(df['when'] >= pd.Timestamp(start)) & (df['when'] <= pd.Timestamp(end))]

    text = (flt.search_text or '').strip()
    if text:
        df = df[
            df['merchant'].str.contains(text, case=False, regex=False)
            | df['notes'].str.contains(text, case=False, regex=False)
        ]

    if flt.category is not None:
        df = df[df['category'] == str(flt.category)]

    df = df.sort_values('when', ascending=False, kind='stable', na_position='last')
    view = [records[i] for i in df.index]

    if flt.sort_order == SortOrder.Oldest:
        view.reverse()
    return view


def derive_goals(records: Sequence[Goal]) -> List[Goal]:
    """Goals are shown in the order the store returned them."""
    return list(records)


def goal_progress(goal: Goal) -> float:
    """Return the goal's progress as a percentage clamped to ``[0, 100]``.

    A zero, negative or non-finite target yields ``0.0``.
    """
    current, target = goal.current_amount, goal.target_amount
    if not (math.isfinite(current) and math.isfinite(target)) or target <= 0:
        return 0.0
    return max(0.0, min(current / target * 100.0, 100.0))


def is_milestone(progress: float, threshold: float = MILESTONE_THRESHOLD) -> bool:
    return progress >= threshold


def remaining_amount(goal: Goal) -> float:
    """Amount still to be saved; never negative."""
    return max(goal.target_amount - goal.current_amount, 0.0)
