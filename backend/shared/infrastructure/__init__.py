"""
Infrastructure module: Database and live order notifications.

Provides:
- Database sessions and transactions (db.py)
- Request correlation IDs (correlation.py)
- Typed events and the in-process Publisher Registry (events/)

Import from the submodules directly; importing db.py creates the engine.
"""
