"""
Data layer: record shapes, derived views and list models.

- :mod:`FinanceTracker.data.entity` – Expense and Goal records, categories and currencies.
- :mod:`FinanceTracker.data.view` – Pure filtering, ordering and goal progress functions.
- :mod:`FinanceTracker.data.model` – Qt list models exposing a screen's derived view.
"""
