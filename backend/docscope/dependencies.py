from fastapi import Request

from docscope.config import Settings, settings
from docscope.db.store import DocumentStore
from docscope.middleware.error_handler import ConfigurationError
from docscope.middleware.input_guard import validate_collection_name


def get_settings() -> Settings:
    return settings


def get_store(request: Request) -> DocumentStore:
    """Document-store handle created at startup by the lifespan."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        detail = getattr(request.app.state, "store_error", None)
        raise ConfigurationError(
            detail=detail or "Document store credentials are not configured. Check your .env file."
        )
    return store


def valid_collection(name: str) -> str:
    return validate_collection_name(name)

