"""
FastAPI dependencies — repository / context / sync / news singletons, identity, filters.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Query

from statewatch import config
from statewatch.data.context import DataContext
from statewatch.errors import Unauthorized, ValidationError
from statewatch.news import NewsFetcher
from statewatch.projects.repository import ProjectRepository
from statewatch.projects.schemas import ProjectFilters, ProjectStatus, ProjectType
from statewatch.sync import SheetSyncPipeline

# ---------------------------------------------------------------------------
# Global singletons (set during startup)
# ---------------------------------------------------------------------------
_repository: ProjectRepository | None = None
_context: DataContext | None = None
_sync_pipeline: SheetSyncPipeline | None = None
_news_fetcher: NewsFetcher | None = None


def set_repository(repository: ProjectRepository | None) -> None:
    global _repository
    _repository = repository


def get_repository() -> ProjectRepository:
    if _repository is None:
        raise HTTPException(503, "Server not initialized yet")
    return _repository


def set_context(context: DataContext | None) -> None:
    global _context
    _context = context


def get_context() -> DataContext:
    if _context is None:
        raise HTTPException(503, "Datasets not initialized yet")
    return _context


def set_sync_pipeline(pipeline: SheetSyncPipeline | None) -> None:
    global _sync_pipeline
    _sync_pipeline = pipeline


def get_sync_pipeline() -> SheetSyncPipeline:
    if _sync_pipeline is None:
        raise HTTPException(503, "Sync pipeline not initialized yet")
    return _sync_pipeline


def set_news_fetcher(fetcher: NewsFetcher | None) -> None:
    global _news_fetcher
    _news_fetcher = fetcher


def get_news_fetcher() -> NewsFetcher:
    if _news_fetcher is None:
        raise HTTPException(503, "News fetcher not initialized yet")
    return _news_fetcher


# ---------------------------------------------------------------------------
# Cron settings
# ---------------------------------------------------------------------------

@dataclass
class CronSettings:
    secret: Optional[str]
    spreadsheet_id: Optional[str]
    sheet_name: str


def get_cron_settings() -> CronSettings:
    return CronSettings(
        secret=config.CRON_SECRET,
        spreadsheet_id=config.GOOGLE_SHEETS_SPREADSHEET_ID,
        sheet_name=config.GOOGLE_SHEETS_SHEET_NAME,
    )


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

def get_user_id(
    user_id: Optional[str] = Header(None, alias=config.USER_ID_HEADER),
) -> Optional[str]:
    """Signed-in user id forwarded by the identity provider, if any."""
    if user_id is None or not user_id.strip():
        return None
    return user_id.strip()


def require_user(user_id: Optional[str]) -> str:
    if user_id is None:
        raise Unauthorized()
    return user_id


# ---------------------------------------------------------------------------
# Project list filters from query params
# ---------------------------------------------------------------------------

def _parse_date(name: str, value: Optional[str]) -> Optional[dt.date]:
    if not value:
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}: {value}", details=[{"field": name, "message": "expected YYYY-MM-DD"}])


def parse_project_filters(
    state_id: Optional[str] = Query(None),
    type: Optional[str] = Query(None, description="construction|machinery"),
    status: Optional[str] = Query(None, description="planning|in-progress|completed|on-hold"),
    start_date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    start_date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date_to: Optional[str] = Query(None, description="YYYY-MM-DD"),
) -> ProjectFilters:
    """Parse list query parameters into ProjectFilters."""
    try:
        project_type = ProjectType(type) if type else None
    except ValueError:
        raise ValidationError(f"Invalid type: {type}")
    try:
        project_status = ProjectStatus(status) if status else None
    except ValueError:
        raise ValidationError(f"Invalid status: {status}")

    return ProjectFilters(
        state_id=state_id or None,
        type=project_type,
        status=project_status,
        start_date_from=_parse_date("start_date_from", start_date_from),
        start_date_to=_parse_date("start_date_to", start_date_to),
        end_date_from=_parse_date("end_date_from", end_date_from),
        end_date_to=_parse_date("end_date_to", end_date_to),
    )
