"""JSON-serialized key-value stores: one file per key, or an in-process dict."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> None:
    if not _KEY_PATTERN.match(key) or key.startswith("."):
        raise ValueError(f"invalid storage key: {key!r}")


class JsonFileStore:
    """Stores each key as ``<root>/<key>.json``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        _check_key(key)
        return self.root / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Unreadable value for %r at %s, using default: %s", key, path, e)
            return default

    def set(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        try:
            payload = json.dumps(value, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            logger.error("Cannot serialize value for %r: %s", key, e)
            return False

        tmp_name = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            # Write beside the target, then swap, so a failed write keeps the old snapshot
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.root)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            logger.error("Failed to write %r to %s: %s", key, path, e)
            return False
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        return True


class InMemoryStore:
    """Dict-backed store. Values still round-trip through JSON."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        # key -> serialized JSON text
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Unreadable value for %r, using default: %s", key, e)
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error("Cannot serialize value for %r: %s", key, e)
            return False
        return True

    def raw(self, key: str) -> str | None:
        """Serialized text stored under key, if any."""
        return self._data.get(key)
