"""Data access managers for the app runtime.

Managers wrap a store and raise domain exceptions (``LookupError``,
``ValueError``, ``PersistenceError``), never backend-specific ones.
"""
