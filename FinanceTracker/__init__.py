"""
FinanceTracker: personal expense and savings goal tracking on a live document store.

This package provides:

- :mod:`FinanceTracker.core` – Session identity, document stores, live subscriptions and validated mutations.
- :mod:`FinanceTracker.data` – Expense and goal records, derived views and Qt list models.
- :mod:`FinanceTracker.screens` – Expenses and goals screen controllers and the add/edit form state machine.
- :mod:`FinanceTracker.settings` – Settings management, schema validation and locale formatting.
- :mod:`FinanceTracker.log` – In-app logging with an in-memory log tank.

Use :func:`FinanceTracker.create_screens` to wire both screens to the configured store.
"""

import sys

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('FinanceTracker requires Python 3.11 or higher.')

__version__ = '0.1.0'
__license__ = 'GPL-3.0'
__description__ = 'FinanceTracker: personal expense and savings goal tracking on a live document store.'

from .log import log

log.setup_logging()


def create_screens(session=None, parent=None):
    """Create the expenses and goals screens on the configured store.

    Args:
        session: The session to follow. Defaults to :data:`FinanceTracker.core.auth.session`.
        parent: Optional Qt parent of both screens.

    Returns:
        tuple: ``(ExpensesScreen, GoalsScreen)``, not yet mounted.
    """
    from .core import auth
    from .core import service
    from .screens.expenses import ExpensesScreen
    from .screens.goals import GoalsScreen

    session = session or auth.session
    store = service.get_store()
    return (
        ExpensesScreen(store, session, parent=parent),
        GoalsScreen(store, session, parent=parent),
    )
