"""Storage backend interface shared by the SQL and blob-JSON adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sceneit_engine.common.config import MAX_PAGE_SIZE
from sceneit_engine.stats.aggregator import StatsMaterials
from sceneit_engine.storage.schemas import (
    EventCreate,
    Transformation,
    TransformationCreate,
    UsageEvent,
)


@dataclass
class TransformationFilter:
    """AND-combined predicates for transformation reads.

    ``date_from``/``date_to`` are inclusive bounds on ``created_at``.
    ``search_text`` is a case-insensitive substring match against the
    prompt, style name and style key.
    """
    opt_in_only: bool = True
    style_key: Optional[str] = None
    search_text: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    def matches(self, record: Transformation) -> bool:
        if self.opt_in_only and not record.opt_in:
            return False
        if self.style_key and record.style_key != self.style_key:
            return False
        if self.search_text:
            needle = self.search_text.lower()
            haystacks = (record.prompt_used, record.style_name, record.style_key)
            if not any(h and needle in h.lower() for h in haystacks):
                return False
        return in_range(record.created_at, self.date_from, self.date_to)


def in_range(value: datetime, date_from: datetime | None, date_to: datetime | None) -> bool:
    if date_from is not None and value < date_from:
        return False
    if date_to is not None and value > date_to:
        return False
    return True


def clamp_page(page: int, per_page: int) -> tuple[int, int]:
    """Normalize 1-indexed paging: page >= 1, 1 <= per_page <= MAX_PAGE_SIZE."""
    return max(1, page), min(MAX_PAGE_SIZE, max(1, per_page))


class StorageBackend(ABC):
    """Durable append and filtered read of transformations and usage events.

    Implementations are selected once at startup (see ``deps``); business
    logic never branches on which one is active.
    """

    name: str = "abstract"

    @property
    def enabled(self) -> bool:
        return True

    async def init(self) -> None:
        """Prepare the backend (connect, create schema). Default: nothing."""

    async def close(self) -> None:
        """Release backend resources. Default: nothing."""

    @abstractmethod
    async def append_transformation(self, record: TransformationCreate) -> str | None:
        """Persist one transformation and return its id.

        Returns ``None`` when persistence is not configured. Write failures
        propagate; callers on the user-facing path must catch them.
        """

    @abstractmethod
    async def append_events(self, records: list[EventCreate]) -> None:
        """Best-effort batched write. Failures are logged, never raised."""

    @abstractmethod
    async def query_transformations(
        self,
        filters: TransformationFilter,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Transformation], int]:
        """Return one page (newest first) and the filtered total count."""

    @abstractmethod
    async def aggregate_all(self, now: datetime, recent_limit: int = 20) -> StatsMaterials:
        """Return pre-aggregated counters for the statistics aggregator."""

    @abstractmethod
    async def list_transformations(
        self,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> list[Transformation]:
        """All transformations in range, newest first (admin export)."""

    @abstractmethod
    async def list_events(
        self,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        event_type: str | None = None,
    ) -> list[UsageEvent]:
        """All usage events in range, newest first (admin export)."""


class DisabledStorageBackend(StorageBackend):
    """Stand-in used when persistence is switched off.

    Writes are dropped and reads are empty, so the enhancement flow and the
    dashboard keep working without any record store configured.
    """

    name = "none"

    @property
    def enabled(self) -> bool:
        return False

    async def append_transformation(self, record: TransformationCreate) -> str | None:
        return None

    async def append_events(self, records: list[EventCreate]) -> None:
        return None

    async def query_transformations(self, filters, page=1, per_page=20):
        return [], 0

    async def aggregate_all(self, now: datetime, recent_limit: int = 20) -> StatsMaterials:
        return StatsMaterials(now=now)

    async def list_transformations(self, date_from=None, date_to=None):
        return []

    async def list_events(self, date_from=None, date_to=None, event_type=None):
        return []
