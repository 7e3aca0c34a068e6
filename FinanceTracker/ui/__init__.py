"""
UI glue for FinanceTracker.

- :mod:`FinanceTracker.ui.actions` – Application-wide Qt signals used for notifications and config changes.
"""
