"""
Statewatch — FastAPI app factory with startup dataset loading.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from statewatch.config import LOG_LEVEL
from statewatch.errors import StatewatchError
from statewatch.api.dependencies import set_context, set_news_fetcher, set_repository, set_sync_pipeline
from statewatch.api.router_meta import router as meta_router
from statewatch.api.router_projects import router as projects_router
from statewatch.api.router_cron import router as cron_router
from statewatch.api.router_dashboard import router as dashboard_router
from statewatch.api.router_news import router as news_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the projects store and start fetching the five datasets."""
    from statewatch.config import BASE_FOLDER, EXPORTS_FOLDER, DATABASE_URL, ADMIN_USER_IDS
    from statewatch.data import DataContext, DatasetFetcher
    from statewatch.projects import ProjectRepository, StaticRoleChecker, init_db, make_engine, make_session_factory
    from statewatch.news import NewsFetcher
    from statewatch.sync import HttpSheetSync

    for d in [BASE_FOLDER, EXPORTS_FOLDER]:
        d.mkdir(parents=True, exist_ok=True)

    # Diagnostic: show exactly where data lives
    print(f"  STATEWATCH_DATA_DIR = {os.environ.get('STATEWATCH_DATA_DIR', '(not set)')}")
    print(f"  DATABASE_URL = {DATABASE_URL}")
    print(f"  Admin users configured: {len(ADMIN_USER_IDS)}")

    engine = make_engine(DATABASE_URL)
    init_db(engine)
    repository = ProjectRepository(make_session_factory(engine), StaticRoleChecker.from_config())
    set_repository(repository)
    set_sync_pipeline(HttpSheetSync())
    news = NewsFetcher()
    set_news_fetcher(news)

    fetcher = DatasetFetcher()
    context = DataContext.from_config()
    context.start(fetcher)
    set_context(context)

    print(f"\nStatewatch ready — {len(repository.list()):,} projects, fetching 5 datasets in background\n")
    try:
        yield
    finally:
        await context.close()
        await fetcher.close()
        await news.close()
        engine.dispose()
        set_context(None)
        set_repository(None)
        set_sync_pipeline(None)
        set_news_fetcher(None)


def _field_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"field": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg", "")}
        for e in exc.errors()
    ]


def create_app() -> FastAPI:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Statewatch API",
        description="Malaysian state statistics dashboard and projects registry",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StatewatchError)
    async def statewatch_error(request: Request, exc: StatewatchError):
        return JSONResponse(status_code=exc.status_code, content=exc.payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": _field_errors(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})

    app.include_router(meta_router)
    app.include_router(projects_router)
    app.include_router(cron_router)
    app.include_router(dashboard_router)
    app.include_router(news_router)

    return app


app = create_app()
