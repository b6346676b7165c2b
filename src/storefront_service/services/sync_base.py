"""Shared machinery for the remote-to-local sync jobs.

A sync run fetches every remote page first, then reconciles records one at a
time. Each row is committed as soon as it is written: a failed child row is
rolled back on its own and never takes its parent or siblings with it.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.constants import (
    REMOTE_PAGE_SIZE,
    SYNC_STATE_ERROR,
    SYNC_STATE_IDLE,
    SYNC_STATE_RUNNING,
)
from storefront_service.infrastructure.database.models import Base, SyncStatus
from storefront_service.infrastructure.shopify import RemotePage
from storefront_service.services.coercion import utcnow

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=Base)


class RemoteCatalog(Protocol):
    """The subset of :class:`ShopifyClient` the sync jobs depend on."""

    async def fetch_products(
        self, first: int = ..., after: str | None = ...
    ) -> RemotePage: ...

    async def fetch_orders(
        self, first: int = ..., after: str | None = ..., query: str | None = ...
    ) -> RemotePage: ...


class BaseSyncService:
    """Pagination, upsert and status bookkeeping shared by sync jobs."""

    sync_id: str = ""

    def __init__(
        self,
        session: AsyncSession,
        client: RemoteCatalog,
        page_size: int = REMOTE_PAGE_SIZE,
        page_delay_seconds: float = 0.5,
    ):
        self.session = session
        self.client = client
        self.page_size = page_size
        self.page_delay_seconds = page_delay_seconds

    async def fetch_all(
        self, fetch_page: Callable[[str | None], Awaitable[RemotePage]]
    ) -> list[dict[str, Any]]:
        """
        Follow the remote cursor until the last page and collect all records.

        Waits ``page_delay_seconds`` between requests. Any fetch error
        propagates and aborts the run; there is no per-page retry.
        """
        records: list[dict[str, Any]] = []
        cursor: str | None = None
        pages = 0

        while True:
            logger.info("Fetching page", sync=self.sync_id, cursor=cursor or "initial")
            page = await fetch_page(cursor)
            pages += 1
            records.extend(page.records)
            logger.info(
                "Fetched page",
                sync=self.sync_id,
                page_records=len(page.records),
                total=len(records),
            )

            if not page.has_next_page:
                break
            if not page.end_cursor:
                logger.warning(
                    "Remote reported another page without a cursor, stopping",
                    sync=self.sync_id,
                    pages=pages,
                )
                break

            cursor = page.end_cursor
            await asyncio.sleep(self.page_delay_seconds)

        return records

    async def upsert(
        self,
        model: type[ModelT],
        lookup: dict[str, Any],
        values: dict[str, Any],
        on_insert: dict[str, Any] | None = None,
    ) -> tuple[int, bool]:
        """
        Update the row matching ``lookup`` or insert a new one, then commit.

        ``on_insert`` holds columns written only when the row is created.

        Returns:
            ``(primary key, created)``
        """
        result = await self.session.execute(select(model).filter_by(**lookup))
        row = result.scalar_one_or_none()
        created = row is None

        if created:
            row = model(**lookup, **values, **(on_insert or {}))
            self.session.add(row)
        else:
            for column, value in values.items():
                setattr(row, column, value)

        await self.session.flush()
        row_id = row.id
        await self.session.commit()
        return row_id, created

    async def lookup_id(self, model: type[ModelT], external_id: str | None) -> int | None:
        """Internal key of the row carrying ``external_id``, if synced."""
        if not external_id:
            return None
        result = await self.session.execute(
            select(model.id).where(model.external_id == external_id)
        )
        return result.scalar_one_or_none()

    async def count_rows(self, model: type[ModelT], *criteria: Any) -> int:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def discard_failed_write(self) -> None:
        """Roll back the pending row after a failed write."""
        await self.session.rollback()

    async def mark_running(self) -> None:
        await self._update_sync_status(SYNC_STATE_RUNNING)

    async def mark_finished(self, records_synced: int) -> None:
        await self._update_sync_status(SYNC_STATE_IDLE, records_synced=records_synced)

    async def mark_failed(self, error_message: str) -> None:
        await self._update_sync_status(SYNC_STATE_ERROR, error_message=error_message)

    async def _update_sync_status(
        self,
        status: str,
        records_synced: int | None = None,
        error_message: str | None = None,
    ) -> None:
        """Upsert the sync_status row for this job."""
        now = utcnow()
        row = await self.session.get(SyncStatus, self.sync_id)
        if row is None:
            row = SyncStatus(id=self.sync_id, records_synced=0)
            self.session.add(row)

        row.status = status
        row.error_message = error_message
        row.updated_at = now
        if records_synced is not None:
            row.records_synced = records_synced
        if status == SYNC_STATE_IDLE:
            row.last_sync_at = now

        await self.session.commit()
