"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
The entry point opens the store here and owns its lifecycle; every other
module receives the connected store (or the repositories built on it).
"""

from __future__ import annotations

from storefront.config.settings import Settings
from storefront.infrastructure.persistence.document_store import JsonDocumentStore
from storefront.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from storefront.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)


def open_store(settings: Settings) -> JsonDocumentStore:
    store = JsonDocumentStore(
        settings.db_path,
        lock_timeout=settings.lock_timeout,
        max_attempts=settings.transaction_attempts,
        backoff_base=settings.retry_backoff,
    )
    return store.connect()


def inventory_repository(store: JsonDocumentStore) -> JsonInventoryRepository:
    return JsonInventoryRepository(store)


def order_repository(store: JsonDocumentStore) -> JsonOrderRepository:
    return JsonOrderRepository(store)
