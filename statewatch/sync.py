"""Spreadsheet sync pipeline used by the cron endpoint."""
from __future__ import annotations

import logging
from typing import Any, Protocol

import aiohttp

from statewatch.config import SHEET_SYNC_URL
from statewatch.errors import UpstreamFailure

logger = logging.getLogger(__name__)


class SheetSyncPipeline(Protocol):
    """Imports one sheet of a spreadsheet into the projects registry.

    Returns the pipeline's result body; it must carry ``success``.
    """

    async def sync(self, spreadsheet_id: str, sheet_name: str) -> dict[str, Any]:
        ...


class HttpSheetSync:
    """Triggers the import by POSTing to the configured sync endpoint."""

    def __init__(self, url: str | None = SHEET_SYNC_URL, session: aiohttp.ClientSession | None = None) -> None:
        self.url = url
        self._session = session

    async def sync(self, spreadsheet_id: str, sheet_name: str) -> dict[str, Any]:
        if not self.url:
            raise UpstreamFailure("SHEET_SYNC_URL not configured")

        body = {"spreadsheetId": spreadsheet_id, "sheetName": sheet_name}
        session = self._session or aiohttp.ClientSession()
        try:
            async with session.post(self.url, json=body) as resp:
                result = await resp.json(content_type=None)
        except aiohttp.ClientError as exc:
            raise UpstreamFailure(f"Sync request to {self.url} failed: {exc}") from exc
        finally:
            if self._session is None:
                await session.close()

        if not isinstance(result, dict):
            raise UpstreamFailure(f"Sync endpoint returned {type(result).__name__}, expected an object")
        logger.debug(f"[sync] {self.url} answered {result}")
        return result
