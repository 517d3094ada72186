"""SQLite document store for profiles, campaigns and the participation index."""

from marketplace.store.reconcile import ReconcileReport, reconcile
from marketplace.store.schema import connect, init_marketplace_db, init_marketplace_tables
from marketplace.store.store import MarketplaceStore

__all__ = [
    "MarketplaceStore",
    "ReconcileReport",
    "connect",
    "init_marketplace_db",
    "init_marketplace_tables",
    "reconcile",
]
