"""
Content store construction and request-scoped access.
"""
from fastapi import Request

from content_ingest.core.config import Settings, settings
from content_ingest.core.logging_config import logger
from content_ingest.services.content_store import ContentStore, InMemoryContentStore
from content_ingest.services.dynamodb_store import DynamoContentStore


def create_content_store(config: Settings = settings) -> ContentStore:
    """Build the store selected by ``storage_backend``."""
    backend = config.storage_backend.lower()
    if backend == "dynamodb":
        return DynamoContentStore(table_prefix=config.dynamodb_table_prefix)
    if backend != "memory":
        logger.warning(f"[StoreProvider] Unknown storage backend '{backend}', using memory")
    return InMemoryContentStore()


def get_content_store(request: Request) -> ContentStore:
    """FastAPI dependency returning the application's store."""
    store = getattr(request.app.state, "content_store", None)
    if store is None:
        store = create_content_store()
        request.app.state.content_store = store
    return store
