"""
Core package for FinanceTracker: store access, live subscriptions and mutations.

This package includes:

- :mod:`FinanceTracker.core.auth` – Session identity and store credential loading.
- :mod:`FinanceTracker.core.store` – The document store contract and the in-process memory store.
- :mod:`FinanceTracker.core.firestore` – Google Cloud Firestore store backend.
- :mod:`FinanceTracker.core.service` – Cached store client and background runners for store round-trips.
- :mod:`FinanceTracker.core.subscription` – User-scoped live subscriptions with stale-callback protection.
- :mod:`FinanceTracker.core.gateway` – Validated create, update and delete operations.
"""
