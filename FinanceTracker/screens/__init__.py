"""
Screen controllers.

- :mod:`FinanceTracker.screens.form` – The add/edit form state machine.
- :mod:`FinanceTracker.screens.base` – Shared subscription, view and delete handling.
- :mod:`FinanceTracker.screens.expenses` – The month-scoped expenses screen.
- :mod:`FinanceTracker.screens.goals` – The savings goals screen.
"""
