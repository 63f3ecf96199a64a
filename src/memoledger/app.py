"""Application facade: what a UI layer calls.

Responsibilities:
1. Wire config → store → repository
2. Translate repository exceptions into Outcome values (success / validation / error)
3. Two-step delete: request a confirmation token, then confirm or cancel it
4. Expose list, dashboard and chart projections over the current memos
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from memoledger.config import MemoConfig, load_config
from memoledger.errors import (
    AttachmentError,
    MemoNotFoundError,
    MemoValidationError,
    RepositoryBusyError,
)
from memoledger.models import Memo, MemoDraft, Upload
from memoledger.query import MemoFilters, QueryResult, SortSpec, distinct_teachers, filter_memos, query
from memoledger.repository import MemoRepository
from memoledger.stats import ChartSeries, DashboardStats, Granularity, department_series, period_series
from memoledger.stats import dashboard as build_dashboard
from memoledger.storage import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)

OutcomeKind = Literal["success", "validation", "error"]

MSG_SAVED = ("สำเร็จ!", "บันทึกข้อมูลเรียบร้อยแล้ว")
MSG_INCOMPLETE = ("ข้อมูลไม่ครบถ้วน", "กรุณากรอกข้อมูลที่จำเป็นให้ครบ")
MSG_SAVE_FAILED = ("ผิดพลาด!", "เกิดข้อผิดพลาดในการบันทึกไฟล์")
MSG_NOT_FOUND = ("ผิดพลาด!", "ไม่พบบันทึกข้อความที่ต้องการแก้ไข")
MSG_BUSY = ("กรุณารอสักครู่", "กำลังบันทึกข้อมูลอยู่")
MSG_CONFIRM_DELETE = ("คุณแน่ใจหรือไม่?", "คุณจะไม่สามารถกู้คืนข้อมูลนี้ได้!")
MSG_DELETED = ("ลบแล้ว!", "ข้อมูลถูกลบเรียบร้อยแล้ว")
MSG_BAD_TOKEN = ("ผิดพลาด!", "คำขอลบไม่ถูกต้องหรือหมดอายุแล้ว")
MSG_NOT_PERSISTED = "ไม่สามารถบันทึกข้อมูลลงในที่จัดเก็บได้ ข้อมูลจะอยู่เฉพาะในรอบการใช้งานนี้"


def setup_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger("memoledger").setLevel(numeric)


@dataclass(frozen=True)
class Outcome:
    """Result of a user action, for the notification surface."""

    kind: OutcomeKind
    title: str
    message: str
    memo: Memo | None = None
    fields: tuple[str, ...] = ()
    persisted: bool = True
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind == "success"


@dataclass(frozen=True)
class DeleteToken:
    """A pending delete awaiting confirmation."""

    token: str
    memo_id: str
    title: str = MSG_CONFIRM_DELETE[0]
    message: str = MSG_CONFIRM_DELETE[1]


class MemoApp:
    """Front door for the memo register."""

    def __init__(
        self,
        config: MemoConfig | None = None,
        store: KeyValueStore | None = None,
    ) -> None:
        self.config = config or load_config()
        self.store = store or JsonFileStore(self.config.data_dir)
        self.repository = MemoRepository(
            self.store,
            self.config.seed_departments,
            memos_key=self.config.storage.memos_key,
            departments_key=self.config.storage.departments_key,
        )
        self._pending_deletes: dict[str, str] = {}  # token → memo_id

    @classmethod
    def bootstrap(
        cls,
        config_path: Path | None = None,
        store: KeyValueStore | None = None,
    ) -> MemoApp:
        """Load config, apply its log level, and build the app. Entry point for UI shells."""
        config = load_config(config_path)
        setup_logging(config.log_level)
        logger.info("Memo register data in %s", config.data_dir)
        return cls(config, store=store)

    @property
    def busy(self) -> bool:
        return self.repository.saving

    @property
    def memos(self) -> tuple[Memo, ...]:
        return self.repository.memos

    @property
    def departments(self) -> tuple[str, ...]:
        return self.repository.departments

    # ── Saving ───────────────────────────────────────────────

    def _success(self, title_message: tuple[str, str], memo: Memo | None = None) -> Outcome:
        persisted = self.repository.last_persist_ok
        return Outcome(
            "success",
            *title_message,
            memo=memo,
            persisted=persisted,
            warning=None if persisted else MSG_NOT_PERSISTED,
        )

    async def save(self, draft: MemoDraft, upload: Upload | None = None) -> Outcome:
        """Add (no draft.id) or update (draft.id set) a memo."""
        try:
            if not draft.id:
                memo = await self.repository.add(draft, upload)
            else:
                memo = await self.repository.update(draft, upload)
        except MemoValidationError as e:
            logger.info("Save rejected, invalid fields: %s", ", ".join(e.fields))
            return Outcome("validation", *MSG_INCOMPLETE, fields=tuple(e.fields))
        except AttachmentError as e:
            logger.error("Error saving memo: %s", e)
            return Outcome("error", *MSG_SAVE_FAILED)
        except MemoNotFoundError as e:
            logger.warning("Update of unknown memo %s", e.memo_id)
            return Outcome("error", *MSG_NOT_FOUND)
        except RepositoryBusyError:
            return Outcome("error", *MSG_BUSY)
        return self._success(MSG_SAVED, memo)

    def add_department(self, name: str) -> bool:
        return self.repository.add_department(name)

    # ── Deleting ─────────────────────────────────────────────

    def request_delete(self, memo_id: str) -> DeleteToken:
        token = secrets.token_urlsafe(16)
        self._pending_deletes[token] = memo_id
        return DeleteToken(token=token, memo_id=memo_id)

    def cancel_delete(self, token: DeleteToken | str) -> None:
        key = token.token if isinstance(token, DeleteToken) else token
        self._pending_deletes.pop(key, None)

    def confirm_delete(self, token: DeleteToken | str) -> Outcome:
        """Carry out a requested delete. Tokens are single-use."""
        key = token.token if isinstance(token, DeleteToken) else token
        memo_id = self._pending_deletes.pop(key, None)
        if memo_id is None:
            return Outcome("error", *MSG_BAD_TOKEN)
        try:
            self.repository.delete(memo_id)
        except RepositoryBusyError:
            self._pending_deletes[key] = memo_id
            return Outcome("error", *MSG_BUSY)
        return self._success(MSG_DELETED)

    # ── Views ────────────────────────────────────────────────

    def list_view(
        self,
        filters: MemoFilters | None = None,
        sort: SortSpec | None = None,
        page: int = 1,
    ) -> QueryResult:
        return query(self.memos, filters, sort or SortSpec(), page, self.config.page_size)

    def teachers(self) -> list[str]:
        return distinct_teachers(self.memos)

    def dashboard(self, filters: MemoFilters | None = None) -> DashboardStats:
        matched = filter_memos(self.memos, filters or MemoFilters())
        return build_dashboard(matched, self.departments)

    def department_chart(self) -> ChartSeries:
        return department_series(self.memos, self.departments)

    def period_chart(self, granularity: Granularity | str = Granularity.MONTH) -> ChartSeries:
        return period_series(self.memos, granularity, self.config.day_locale)
