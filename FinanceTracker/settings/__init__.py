"""
Settings package: configuration API and localization helpers.

This package provides:

- :mod:`FinanceTracker.settings.lib` – Settings management and schema validation.
- :mod:`FinanceTracker.settings.locale` – Localization utilities for formatting amounts and dates.
"""
