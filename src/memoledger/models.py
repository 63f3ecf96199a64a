"""Memo record types and their persisted (camelCase) representation."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

REQUIRED_FIELDS = ("memo_number", "date", "teacher", "subject", "department")

# Python attribute -> persisted key
_WIRE_KEYS = {
    "id": "id",
    "memo_number": "memoNumber",
    "date": "date",
    "teacher": "teacher",
    "subject": "subject",
    "department": "department",
    "file_data": "fileData",
    "file_name": "fileName",
    "file_type": "fileType",
}


def parse_iso_date(value: str | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` string (a trailing time part is ignored)."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def normalize_form_date(value: str | None) -> str | None:
    """Strict ``YYYY-MM-DD`` check for saved dates; returns the zero-padded form."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date().isoformat()
    except ValueError:
        return None


def _data_uri_type(data_uri: str) -> str:
    header = data_uri[5:].split(",", 1)[0] if data_uri.startswith("data:") else ""
    return header.split(";", 1)[0] or "application/octet-stream"


@dataclass(frozen=True)
class Memo:
    """One stored administrative memo."""

    id: str
    memo_number: str
    date: str
    teacher: str
    subject: str
    department: str
    file_data: str | None = None
    file_name: str | None = None
    file_type: str | None = None

    @property
    def parsed_date(self) -> date | None:
        return parse_iso_date(self.date)

    def to_dict(self) -> dict:
        """Persisted form; unset file fields are omitted."""
        data = {}
        for attr, key in _WIRE_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Memo:
        """Build from the persisted form. Raises KeyError/TypeError on bad input."""
        if not isinstance(data, dict):
            raise TypeError(f"expected dict, got {type(data).__name__}")
        values = {attr: data.get(key) for attr, key in _WIRE_KEYS.items()}
        if values["id"] is None or values["id"] == "":
            raise KeyError("id")
        values["id"] = str(values["id"])
        for attr in REQUIRED_FIELDS:
            values[attr] = "" if values[attr] is None else str(values[attr])
        if isinstance(values["file_data"], str) and values["file_data"]:
            values["file_name"] = str(values["file_name"] or "attachment")
            values["file_type"] = str(values["file_type"] or _data_uri_type(values["file_data"]))
        else:
            values["file_data"] = values["file_name"] = values["file_type"] = None
        return cls(**values)


@dataclass
class MemoDraft:
    """Field values submitted by the memo form. ``id`` is set when editing."""

    memo_number: str | None = None
    date: str | None = None
    teacher: str | None = None
    subject: str | None = None
    department: str | None = None
    id: str | None = None

    @classmethod
    def from_memo(cls, memo: Memo) -> MemoDraft:
        return cls(
            memo_number=memo.memo_number,
            date=memo.date,
            teacher=memo.teacher,
            subject=memo.subject,
            department=memo.department,
            id=memo.id,
        )

    def missing_fields(self) -> list[str]:
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or not str(value).strip():
                missing.append(name)
        return missing


@dataclass
class Upload:
    """A file handed over by the file picker, either as bytes or a path."""

    name: str
    content_type: str | None = None
    content: bytes | None = None
    path: Path | None = None

    def __post_init__(self) -> None:
        if self.path is not None and not isinstance(self.path, Path):
            self.path = Path(self.path)

    @classmethod
    def from_path(cls, path: Path | str, content_type: str | None = None) -> Upload:
        path = Path(path)
        return cls(name=path.name, content_type=content_type, path=path)


@dataclass(frozen=True)
class EncodedFile:
    """An upload encoded for inline storage."""

    data_uri: str
    name: str
    content_type: str


@dataclass
class FileFields:
    """The three attachment fields, set or unset together."""

    file_data: str | None = None
    file_name: str | None = None
    file_type: str | None = None

    @classmethod
    def of(cls, memo: Memo | None) -> FileFields:
        if memo is None or memo.file_data is None:
            return cls()
        return cls(memo.file_data, memo.file_name, memo.file_type)

    @classmethod
    def encoded(cls, encoded: EncodedFile) -> FileFields:
        return cls(encoded.data_uri, encoded.name, encoded.content_type)

    def asdict(self) -> dict:
        return dataclasses.asdict(self)
