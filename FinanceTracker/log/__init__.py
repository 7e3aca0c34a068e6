"""
Logging subsystem for FinanceTracker.

Modules:

- :mod:`FinanceTracker.log.log` – Root logger setup, an in-memory log tank and the Qt message bridge.
"""
