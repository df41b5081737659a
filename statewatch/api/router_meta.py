"""
Meta endpoints: health.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from statewatch.config import API_PREFIX
from statewatch.api.dependencies import get_context, get_repository
from statewatch.api.response_models import HealthResponse
from statewatch.data import DataContext
from statewatch.projects import ProjectRepository

router = APIRouter(prefix=API_PREFIX, tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(
    ctx: DataContext = Depends(get_context),
    repo: ProjectRepository = Depends(get_repository),
):
    return HealthResponse(
        status="ok",
        datasets_loaded=len(ctx.loaded_categories),
        datasets_loading=ctx.is_loading,
        projects=len(repo.list()),
    )
