"""Key-value store protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol that all storage media must implement."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default if absent or unreadable."""
        ...

    def set(self, key: str, value: Any) -> bool:
        """Serialize and store value under key. Returns False on failure."""
        ...
