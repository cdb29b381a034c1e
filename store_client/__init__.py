"""
Cliente do key/value store versionado.

Operações: get, set, create, update, refresh, compare_and_swap e wait.
Todas devolvem um StoreResponse; use has_error/error_message para classificá-lo.
"""
from common.models import RequestOptions, StoreResponse, has_error, error_message
from store_client.client import StoreClient, resolve_options

__version__ = "1.0.0"
__all__ = [
    "StoreClient",
    "StoreResponse",
    "RequestOptions",
    "has_error",
    "error_message",
    "resolve_options",
]
