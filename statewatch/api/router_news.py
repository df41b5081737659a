"""
News endpoints: merged headlines from the configured RSS / Atom feeds.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from statewatch.config import API_PREFIX, DEFAULT_NEWS_SOURCES
from statewatch.api.dependencies import get_news_fetcher
from statewatch.api.response_models import NewsResponse, NewsSourcesResponse
from statewatch.news import NewsFetcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/news", tags=["news"])


@router.get("", response_model=NewsResponse)
async def list_news(
    sources: Optional[str] = Query(None, description="Comma-separated feed names"),
    fetcher: NewsFetcher = Depends(get_news_fetcher),
):
    """Newest items first. Unknown sources are ignored; failing feeds contribute nothing."""
    selected = [s.strip() for s in sources.split(",") if s.strip()] if sources else None
    try:
        news = await fetcher.fetch(selected)
    except Exception as exc:
        logger.error(f"[news] Error fetching news: {exc}")
        return JSONResponse(status_code=500, content={"success": False, "news": [], "error": str(exc)})
    return NewsResponse(news=news)


@router.get("/sources", response_model=NewsSourcesResponse)
def news_sources(fetcher: NewsFetcher = Depends(get_news_fetcher)):
    return NewsSourcesResponse(sources=list(fetcher.feeds), default=fetcher.known_sources(DEFAULT_NEWS_SOURCES))
