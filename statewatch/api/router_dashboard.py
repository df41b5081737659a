"""
Dashboard endpoints — read-only views over the loaded state datasets.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from statewatch.config import API_PREFIX, CATEGORY_LABELS
from statewatch.api.dependencies import get_context
from statewatch.api.response_models import (
    CategoriesResponse, CategoryInfo, DatasetInfo, DatasetsResponse, LatestResponse, SeriesResponse,
)
from statewatch.data import Category, DataContext, chart_kind_for, limit_points, normalize_state
from statewatch.errors import ValidationError

router = APIRouter(prefix=API_PREFIX, tags=["dashboard"])


def _parse_category(value: str) -> Category:
    try:
        return Category(value)
    except ValueError:
        raise ValidationError(
            f"Invalid category: {value}",
            details=[{"field": "category", "message": f"expected one of {[c.value for c in Category]}"}],
        )


@router.get("/datasets", response_model=DatasetsResponse)
def list_datasets(ctx: DataContext = Depends(get_context)):
    loaded = ctx.loaded_categories
    datasets = [
        DatasetInfo(
            category=category.value,
            chart_kind=chart_kind_for(category).value,
            label=CATEGORY_LABELS[category.value]["en"],
            loaded=category in loaded,
            records=len(ctx.dataset(category)),
        )
        for category in Category
    ]
    return DatasetsResponse(datasets=datasets, loading=ctx.is_loading)


@router.get("/categories", response_model=CategoriesResponse)
def list_categories():
    return CategoriesResponse(categories=[
        CategoryInfo(
            category=category.value,
            chart_kind=chart_kind_for(category).value,
            labels=CATEGORY_LABELS[category.value],
        )
        for category in Category
    ])


@router.get("/states/{state}/latest", response_model=LatestResponse)
def state_latest(
    state: str,
    category: Optional[str] = Query(None, description="Limit to one category"),
    ctx: DataContext = Depends(get_context),
):
    """Most recent observation per category for one state (null where there is none)."""
    categories = [_parse_category(category)] if category else list(Category)
    latest = {}
    for cat in categories:
        obs = ctx.point_lookup(state, cat)
        latest[cat.value] = obs.as_dict() if obs is not None else None
    return LatestResponse(state=normalize_state(state), latest=latest)


@router.get("/states/{state}/series", response_model=SeriesResponse)
def state_series(
    state: str,
    max_points: Optional[int] = Query(None, ge=1, description="Downsample each series for display"),
    ctx: DataContext = Depends(get_context),
):
    """Date-ordered series for every category; unknown states get empty lists."""
    series = {}
    for category, observations in ctx.series_for(state).items():
        if max_points is not None:
            observations = limit_points(observations, max_points)
        series[category.value] = [obs.as_dict() for obs in observations]
    return SeriesResponse(state=normalize_state(state), max_points=max_points, series=series)
