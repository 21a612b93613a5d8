"""
Backend API modules.

Modules:
    api_client  - Product create/update and category listing
    token_store - Key-value store holding the bearer token
"""

from .api_client import StorefrontAPIClient
from .token_store import ACCESS_TOKEN_KEY, JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    'ACCESS_TOKEN_KEY',
    'JsonFileStore',
    'KeyValueStore',
    'MemoryStore',
    'StorefrontAPIClient',
]
