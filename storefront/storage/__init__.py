"""
Storage Module

Local key/value storage for session continuity and the product store.
"""

from .local_storage import LocalStorage, MemoryLocalStorage, JSONFileLocalStorage
from .product_store import ProductStore, InMemoryProductStore

__all__ = [
    "LocalStorage",
    "MemoryLocalStorage",
    "JSONFileLocalStorage",
    "ProductStore",
    "InMemoryProductStore",
]
