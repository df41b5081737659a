"""
Projects registry endpoints — list/filter, CRUD, statistics, Excel export/import.
"""
from __future__ import annotations

import io
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, File, UploadFile
from fastapi.responses import StreamingResponse

from statewatch.config import API_PREFIX
from statewatch.api.dependencies import get_repository, get_user_id, parse_project_filters, require_user
from statewatch.api.response_models import (
    DeleteResponse, ImportResponse, ProjectListResponse, ProjectResponse, ProjectStatsResponse,
)
from statewatch.errors import ValidationError
from statewatch.excel import XLSX_MEDIA_TYPE, encode_projects, export_filename, read_project_rows
from statewatch.projects import REQUIRED_FIELDS, ProjectFilters, ProjectRepository, missing_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/projects", tags=["projects"])


@router.get("", response_model=ProjectListResponse)
def list_projects(
    repo: ProjectRepository = Depends(get_repository),
    filters: ProjectFilters = Depends(parse_project_filters),
):
    """All projects, newest first, optionally filtered."""
    projects = repo.list() if filters.is_empty else repo.list_filtered(filters)
    return ProjectListResponse(data=projects, count=len(projects))


@router.post("", status_code=201, response_model=ProjectResponse)
def create_project(
    payload: Optional[dict[str, Any]] = Body(None),
    repo: ProjectRepository = Depends(get_repository),
    user_id: Optional[str] = Depends(get_user_id),
):
    actor = require_user(user_id)
    payload = payload or {}
    if missing_fields(payload):
        raise ValidationError("Missing required fields", required=list(REQUIRED_FIELDS))
    project = repo.create(payload, actor)
    return ProjectResponse(data=project, message="Project created successfully")


# Fixed paths are declared before /{project_id} so they are not captured by it.

@router.get("/stats", response_model=ProjectStatsResponse)
def project_stats(repo: ProjectRepository = Depends(get_repository)):
    return ProjectStatsResponse(data=repo.statistics())


@router.get("/export-excel")
def export_excel(
    repo: ProjectRepository = Depends(get_repository),
    user_id: Optional[str] = Depends(get_user_id),
):
    """Every project as an .xlsx download."""
    require_user(user_id)
    content = encode_projects(repo.list())
    filename = export_filename()
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/upload-excel", response_model=ImportResponse)
def upload_excel(
    file: Optional[UploadFile] = File(None),
    repo: ProjectRepository = Depends(get_repository),
    user_id: Optional[str] = Depends(get_user_id),
):
    """Create or update projects (matched by name) from the first sheet of an upload."""
    actor = require_user(user_id)
    if file is None:
        raise ValidationError("No file uploaded")

    try:
        rows = read_project_rows(file.file.read())
    except Exception as exc:
        logger.warning(f"[upload-excel] Unreadable upload {file.filename!r}: {exc}")
        raise ValidationError(f"Could not read spreadsheet: {file.filename}") from exc

    results = repo.upsert_by_name(rows, actor)
    logger.info(
        f"[upload-excel] {len(rows)} rows: {results['created']} created, "
        f"{results['updated']} updated, {len(results['errors'])} errors"
    )
    return ImportResponse(message=f"Processed {len(rows)} rows", results=results)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, repo: ProjectRepository = Depends(get_repository)):
    return ProjectResponse(data=repo.get_by_id(project_id))


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    payload: Optional[dict[str, Any]] = Body(None),
    repo: ProjectRepository = Depends(get_repository),
    user_id: Optional[str] = Depends(get_user_id),
):
    actor = require_user(user_id)
    project = repo.update(project_id, payload or {}, actor)
    return ProjectResponse(data=project, message="Project updated successfully")


@router.delete("/{project_id}", response_model=DeleteResponse)
def delete_project(
    project_id: str,
    repo: ProjectRepository = Depends(get_repository),
    user_id: Optional[str] = Depends(get_user_id),
):
    actor = require_user(user_id)
    repo.delete(project_id, actor)
    return DeleteResponse(message="Project deleted successfully")
