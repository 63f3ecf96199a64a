"""Configuration loading from environment variables and memoledger.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_DATA_DIR = Path.home() / ".memoledger" / "data"
_CONFIG_FILENAME = "memoledger.toml"

DEFAULT_DEPARTMENTS = [
    "งานบริหารวิชาการ",
    "งานบริหารงบประมาณ",
    "งานบริหารบุคลากร",
    "งานบริหารทั่วไป",
]


@dataclass
class StorageConfig:
    """Names of the two persisted entries."""

    memos_key: str = "memos"
    departments_key: str = "departments"


@dataclass
class MemoConfig:
    """Top-level memoledger configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    data_dir: Path = _DEFAULT_DATA_DIR
    seed_departments: list[str] = field(default_factory=lambda: list(DEFAULT_DEPARTMENTS))
    page_size: int = 10
    day_locale: str = "th-TH"
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> MemoConfig:
    """Load configuration from environment variables and optional memoledger.toml.

    Priority: environment variables > memoledger.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    else:
        # Search current dir and ~/.memoledger/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".memoledger" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text(encoding="utf-8"))
                break

    storage_data = file_data.get("storage", {})
    departments_data = file_data.get("departments", {})

    page_size = int(os.getenv("MEMOLEDGER_PAGE_SIZE", file_data.get("page_size", 10)))
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    config = MemoConfig(
        storage=StorageConfig(
            memos_key=storage_data.get("memos_key", "memos"),
            departments_key=storage_data.get("departments_key", "departments"),
        ),
        data_dir=Path(
            os.getenv("MEMOLEDGER_DATA_DIR", file_data.get("data_dir", str(_DEFAULT_DATA_DIR)))
        ).expanduser(),
        seed_departments=list(departments_data.get("seed", DEFAULT_DEPARTMENTS)),
        page_size=page_size,
        day_locale=os.getenv("MEMOLEDGER_DAY_LOCALE", file_data.get("day_locale", "th-TH")),
        log_level=os.getenv("MEMOLEDGER_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
