"""Memo repository: the single owner and writer of the memo and department lists.

Both collections are immutable tuples. Every mutation builds a new tuple,
swaps it in, and writes the whole collection back to the store as a
versioned snapshot:

    {"schema_version": 1, "memos": [...]}
    {"schema_version": 1, "departments": [...]}

A bare JSON array under either key is the older unversioned layout; it is
read as-is and rewritten in the versioned form on the next mutation.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from memoledger.attachments import encode_upload
from memoledger.errors import MemoNotFoundError, MemoValidationError, RepositoryBusyError
from memoledger.models import FileFields, Memo, MemoDraft, Upload, normalize_form_date
from memoledger.storage import KeyValueStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class MemoRepository:
    """Create, update, delete and list memos; add departments."""

    def __init__(
        self,
        store: KeyValueStore,
        seed_departments: list[str] | tuple[str, ...] = (),
        *,
        memos_key: str = "memos",
        departments_key: str = "departments",
    ) -> None:
        self.store = store
        self.memos_key = memos_key
        self.departments_key = departments_key
        self._seed_departments = _unique_names(seed_departments)
        self._saving = False
        self.last_persist_ok = True
        self._memos: tuple[Memo, ...] = self._load_memos()
        self._departments: tuple[str, ...] = self._load_departments()

    # ── Read access ──────────────────────────────────────────

    @property
    def memos(self) -> tuple[Memo, ...]:
        return self._memos

    @property
    def departments(self) -> tuple[str, ...]:
        return self._departments

    @property
    def saving(self) -> bool:
        """True while an add/update is waiting on attachment encoding."""
        return self._saving

    def get(self, memo_id: str) -> Memo | None:
        for memo in self._memos:
            if memo.id == memo_id:
                return memo
        return None

    # ── Loading ──────────────────────────────────────────────

    def _unwrap(self, key: str, field_name: str) -> list | None:
        """Return the stored list under key, accepting both snapshot layouts."""
        raw: Any = self.store.get(key, None)
        if raw is None:
            return None
        if isinstance(raw, list):
            logger.info("Reading unversioned %r snapshot", key)
            return raw
        if isinstance(raw, dict) and isinstance(raw.get(field_name), list):
            version = raw.get("schema_version")
            if version != SCHEMA_VERSION:
                logger.warning("%r has schema_version %r, expected %d", key, version, SCHEMA_VERSION)
            return raw[field_name]
        logger.warning("Unrecognized %r snapshot (%s), using default", key, type(raw).__name__)
        return None

    def _load_memos(self) -> tuple[Memo, ...]:
        items = self._unwrap(self.memos_key, "memos")
        if items is None:
            return ()
        memos: list[Memo] = []
        seen: set[str] = set()
        for item in items:
            try:
                memo = Memo.from_dict(item)
            except (KeyError, TypeError) as e:
                logger.warning("Skipping malformed memo entry: %s", e)
                continue
            if memo.id in seen:
                logger.warning("Skipping duplicate memo id %s", memo.id)
                continue
            seen.add(memo.id)
            memos.append(memo)
        logger.info("Loaded %d memos", len(memos))
        return tuple(memos)

    def _load_departments(self) -> tuple[str, ...]:
        items = self._unwrap(self.departments_key, "departments")
        if items is None:
            return self._seed_departments
        names = _unique_names(n for n in items if isinstance(n, str))
        return names or self._seed_departments

    # ── Persistence ──────────────────────────────────────────

    def _persist_memos(self) -> bool:
        snapshot = {
            "schema_version": SCHEMA_VERSION,
            "memos": [m.to_dict() for m in self._memos],
        }
        self.last_persist_ok = self.store.set(self.memos_key, snapshot)
        if not self.last_persist_ok:
            logger.error("Memo snapshot not persisted; keeping %d memos in memory", len(self._memos))
        return self.last_persist_ok

    def _persist_departments(self) -> bool:
        snapshot = {
            "schema_version": SCHEMA_VERSION,
            "departments": list(self._departments),
        }
        self.last_persist_ok = self.store.set(self.departments_key, snapshot)
        if not self.last_persist_ok:
            logger.error("Department list not persisted")
        return self.last_persist_ok

    # ── Validation ───────────────────────────────────────────

    def _ensure_idle(self) -> None:
        if self._saving:
            raise RepositoryBusyError("a save is already in progress")

    def _validate(self, draft: MemoDraft, previous: Memo | None = None) -> None:
        """Raise MemoValidationError listing every missing or invalid field."""
        problems = draft.missing_fields()
        if "date" not in problems and normalize_form_date(draft.date) is None:
            problems.append("date")
        if "department" not in problems:
            department = draft.department.strip()
            # A record may keep a department that has since left the list
            kept_stale = previous is not None and department == previous.department
            if department not in self._departments and not kept_stale:
                problems.append("department")
        if problems:
            raise MemoValidationError(problems)

    def _mint_id(self) -> str:
        existing = {m.id for m in self._memos}
        while True:
            memo_id = f"memo_{uuid.uuid4().hex}"
            if memo_id not in existing:
                return memo_id

    async def _file_fields(self, upload: Upload | None, previous: Memo | None) -> FileFields:
        if upload is None:
            return FileFields.of(previous)
        self._saving = True
        try:
            return FileFields.encoded(await encode_upload(upload))
        finally:
            self._saving = False

    @staticmethod
    def _build(memo_id: str, draft: MemoDraft, files: FileFields) -> Memo:
        return Memo(
            id=memo_id,
            memo_number=draft.memo_number.strip(),
            date=normalize_form_date(draft.date),
            teacher=draft.teacher.strip(),
            subject=draft.subject.strip(),
            department=draft.department.strip(),
            **files.asdict(),
        )

    # ── Mutations ────────────────────────────────────────────

    async def add(self, draft: MemoDraft, upload: Upload | None = None) -> Memo:
        """Append a new memo with a freshly minted id.

        Raises MemoValidationError before any work is done, and AttachmentError
        if the upload cannot be encoded; neither leaves a partial record.
        """
        self._ensure_idle()
        self._validate(draft)
        files = await self._file_fields(upload, None)

        memo = self._build(self._mint_id(), draft, files)
        self._memos = self._memos + (memo,)
        self._persist_memos()
        logger.info("Added memo %s (%s)", memo.id, memo.memo_number)
        return memo

    async def update(self, draft: MemoDraft, upload: Upload | None = None) -> Memo:
        """Replace the memo whose id matches draft.id.

        Without an upload the previous attachment fields are carried over.
        Raises MemoNotFoundError if no memo has that id.
        """
        self._ensure_idle()
        previous = self.get(draft.id) if draft.id else None
        if previous is None:
            raise MemoNotFoundError(draft.id or "")
        self._validate(draft, previous)
        files = await self._file_fields(upload, previous)

        memo = self._build(previous.id, draft, files)
        self._memos = tuple(memo if m.id == memo.id else m for m in self._memos)
        self._persist_memos()
        logger.info("Updated memo %s", memo.id)
        return memo

    def delete(self, memo_id: str) -> bool:
        """Remove a memo. Unknown ids leave the list unchanged. Returns whether one was removed."""
        self._ensure_idle()
        remaining = tuple(m for m in self._memos if m.id != memo_id)
        removed = len(remaining) < len(self._memos)
        self._memos = remaining
        self._persist_memos()
        if removed:
            logger.info("Deleted memo %s", memo_id)
        else:
            logger.debug("Delete of unknown memo %s ignored", memo_id)
        return removed

    def add_department(self, name: str) -> bool:
        """Append a department unless it is empty or already present."""
        name = (name or "").strip()
        if not name or name in self._departments:
            return False
        self._departments = self._departments + (name,)
        self._persist_departments()
        logger.info("Added department %s", name)
        return True


def _unique_names(names) -> tuple[str, ...]:
    result: list[str] = []
    for name in names:
        name = name.strip()
        if name and name not in result:
            result.append(name)
    return tuple(result)
