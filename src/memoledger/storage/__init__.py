"""Durable key-value storage behind the memo repository.

A store maps a short key to one JSON document. ``get`` falls back to the
caller's default on any read or parse failure; ``set`` reports failure by
returning False instead of raising, so the in-memory collections stay
authoritative for the session.
"""

from memoledger.storage.base import KeyValueStore
from memoledger.storage.json_store import InMemoryStore, JsonFileStore

__all__ = ["InMemoryStore", "JsonFileStore", "KeyValueStore"]
