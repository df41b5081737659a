"""
Scheduled jobs: spreadsheet → projects sync.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse

from statewatch.config import API_PREFIX
from statewatch.api.dependencies import CronSettings, get_cron_settings, get_sync_pipeline
from statewatch.sync import SheetSyncPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/cron", tags=["cron"])


def _timestamp() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


@router.api_route("/sync-sheets", methods=["GET", "POST"])
async def sync_sheets(
    x_cron_secret: Optional[str] = Header(None),
    secret: Optional[str] = Query(None),
    settings: CronSettings = Depends(get_cron_settings),
    pipeline: SheetSyncPipeline = Depends(get_sync_pipeline),
):
    """Run the spreadsheet import. Called periodically by an external scheduler."""
    provided = x_cron_secret or secret
    if settings.secret and provided != settings.secret:
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    if not settings.spreadsheet_id:
        return JSONResponse(
            status_code=500,
            content={"error": "GOOGLE_SHEETS_SPREADSHEET_ID not configured in environment variables"},
        )

    try:
        result = await pipeline.sync(settings.spreadsheet_id, settings.sheet_name)
    except Exception as exc:
        logger.error(f"[cron] Error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc), "timestamp": _timestamp()},
        )

    if not result.get("success"):
        logger.error(f"[cron] Sync failed: {result}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": result.get("error"), "timestamp": _timestamp()},
        )

    logger.info(f"[cron] Sync successful: {result}")
    return {
        "success": True,
        "message": "Automatic sync completed",
        **{k: v for k, v in result.items() if k not in ("success", "message")},
        "timestamp": _timestamp(),
    }
