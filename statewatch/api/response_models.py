"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel

from statewatch.news import NewsItem
from statewatch.projects.schemas import ProjectOut


class HealthResponse(BaseModel):
    status: str
    datasets_loaded: int
    datasets_loading: bool
    projects: int


class ProjectListResponse(BaseModel):
    success: bool = True
    data: list[ProjectOut]
    count: int


class ProjectResponse(BaseModel):
    success: bool = True
    data: ProjectOut
    message: Optional[str] = None


class ProjectStatsResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]


class ImportResults(BaseModel):
    created: int
    updated: int
    errors: list[str]


class ImportResponse(BaseModel):
    success: bool = True
    message: str
    results: ImportResults


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class DatasetInfo(BaseModel):
    category: str
    chart_kind: str
    label: str
    loaded: bool
    records: int


class DatasetsResponse(BaseModel):
    datasets: list[DatasetInfo]
    loading: bool


class CategoryInfo(BaseModel):
    category: str
    chart_kind: str
    labels: dict[str, str]


class CategoriesResponse(BaseModel):
    categories: list[CategoryInfo]


class LatestResponse(BaseModel):
    state: str
    latest: dict[str, Optional[dict[str, Any]]]


class SeriesResponse(BaseModel):
    state: str
    max_points: Optional[int] = None
    series: dict[str, list[dict[str, Any]]]


class NewsResponse(BaseModel):
    success: bool = True
    news: list[NewsItem]
    error: Optional[str] = None


class NewsSourcesResponse(BaseModel):
    sources: list[str]
    default: list[str]
