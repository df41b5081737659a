"""
ProjectRepository — the only reader/writer of the projects table.

Every mutation re-checks the actor's role itself, then validates, then
writes; nothing is written when either check fails.
"""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Sequence

import pandas as pd
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from statewatch.config import ADMIN_ROLE
from statewatch.errors import Forbidden, NotFound, StatewatchError, UpstreamFailure, ValidationError
from statewatch.projects.auth import RoleChecker
from statewatch.projects.models import Project
from statewatch.projects.schemas import (
    ProjectCreate, ProjectFilters, ProjectOut, ProjectStatus, ProjectType, ProjectUpdate,
    missing_fields,
)

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _validate(model: type[BaseModel], data: Mapping[str, Any] | BaseModel) -> Any:
    """Validate a payload, turning pydantic errors into our ValidationError."""
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(dict(data))
    except SchemaError as exc:
        errors = exc.errors()
        missing = [str(e["loc"][0]) for e in errors if e["type"] == "missing" and e["loc"]]
        details = [
            {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
            for e in errors
        ]
        raise ValidationError("Invalid project data", required=missing or None, details=details) from exc


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def summarize(projects: Sequence[ProjectOut]) -> dict:
    """Aggregate counts and sums over a list of projects."""
    stats: dict[str, Any] = {
        "total_projects": len(projects),
        "total_budget": 0.0,
        "total_disbursed": 0.0,
        "average_progress": 0.0,
        "by_status": {s.value: 0 for s in ProjectStatus},
        "by_type": {t.value: 0 for t in ProjectType},
        "by_state": {},
    }
    if not projects:
        return stats

    df = pd.DataFrame([p.model_dump(mode="json") for p in projects])
    stats["total_budget"] = float(df["budget"].sum())
    stats["total_disbursed"] = float(df["disbursed"].fillna(0).sum())
    stats["average_progress"] = round(float(df["progress"].mean()), 2)
    stats["by_status"].update({k: int(v) for k, v in df["status"].value_counts().items()})
    stats["by_type"].update({k: int(v) for k, v in df["type"].value_counts().items()})
    stats["by_state"] = {k: int(v) for k, v in df.groupby("state_id").size().items()}
    return stats


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class ProjectRepository:
    """CRUD, filtering and statistics over the projects table."""

    def __init__(self, session_factory: sessionmaker, role_checker: RoleChecker) -> None:
        self._session_factory = session_factory
        self._role_checker = role_checker

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except StatewatchError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(f"[projects] Store failure in {operation}: {exc}")
            raise UpstreamFailure(str(exc)) from exc
        finally:
            session.close()

    def _require_admin(self, acting_user_id: Optional[str], action: str) -> None:
        if not acting_user_id or not self._role_checker.has_role(acting_user_id, ADMIN_ROLE):
            logger.warning(f"[projects] {action} refused for user {acting_user_id!r}")
            raise Forbidden(f"Unauthorized: Only admins can {action} projects")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, project_id: str) -> ProjectOut:
        with self._session("get_by_id") as session:
            row = session.get(Project, project_id)
            if row is None:
                raise NotFound(f"Project not found: {project_id}")
            return ProjectOut.model_validate(row)

    def list(self) -> list[ProjectOut]:
        """All projects, newest first."""
        return self.list_filtered(ProjectFilters())

    def list_filtered(self, filters: ProjectFilters) -> list[ProjectOut]:
        stmt = select(Project)
        if filters.state_id:
            stmt = stmt.where(Project.state_id == filters.state_id.lower())
        if filters.type:
            stmt = stmt.where(Project.type == ProjectType(filters.type).value)
        if filters.status:
            stmt = stmt.where(Project.status == ProjectStatus(filters.status).value)
        if filters.start_date_from:
            stmt = stmt.where(Project.start_date >= filters.start_date_from)
        if filters.start_date_to:
            stmt = stmt.where(Project.start_date <= filters.start_date_to)
        if filters.end_date_from:
            stmt = stmt.where(Project.end_date >= filters.end_date_from)
        if filters.end_date_to:
            stmt = stmt.where(Project.end_date <= filters.end_date_to)
        stmt = stmt.order_by(Project.created_at.desc(), Project.id)

        with self._session("list") as session:
            return [ProjectOut.model_validate(row) for row in session.scalars(stmt)]

    def statistics(self) -> dict:
        return summarize(self.list())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, data: Mapping[str, Any] | ProjectCreate, acting_user_id: Optional[str]) -> ProjectOut:
        self._require_admin(acting_user_id, "create")
        payload: ProjectCreate = _validate(ProjectCreate, data)

        now = _utcnow()
        row = Project(
            id=uuid.uuid4().hex,
            created_by=acting_user_id,
            created_at=now,
            updated_at=now,
            **payload.model_dump(),
        )
        with self._session("create") as session:
            session.add(row)
            session.flush()
            project = ProjectOut.model_validate(row)
        logger.info(f"[projects] Created {project.id} ({project.name}) by {acting_user_id}")
        return project

    def update(
        self,
        project_id: str,
        data: Mapping[str, Any] | ProjectUpdate,
        acting_user_id: Optional[str],
    ) -> ProjectOut:
        self._require_admin(acting_user_id, "update")
        changes = _validate(ProjectUpdate, data).changes()

        with self._session("update") as session:
            row = session.get(Project, project_id)
            if row is None:
                raise NotFound(f"Project not found: {project_id}")
            for field_name, value in changes.items():
                setattr(row, field_name, value)
            row.updated_at = _utcnow()
            session.flush()
            project = ProjectOut.model_validate(row)
        logger.info(f"[projects] Updated {project_id} ({', '.join(changes) or 'no fields'}) by {acting_user_id}")
        return project

    def delete(self, project_id: str, acting_user_id: Optional[str]) -> bool:
        self._require_admin(acting_user_id, "delete")
        with self._session("delete") as session:
            row = session.get(Project, project_id)
            if row is None:
                raise NotFound(f"Project not found: {project_id}")
            session.delete(row)
        logger.info(f"[projects] Deleted {project_id} by {acting_user_id}")
        return True

    def upsert_by_name(self, rows: Sequence[Mapping[str, Any]], acting_user_id: Optional[str]) -> dict:
        """Create or update projects matched by name (spreadsheet import).

        Row numbers in the error list are spreadsheet rows (header is row 1).
        """
        self._require_admin(acting_user_id, "import")
        results: dict[str, Any] = {"created": 0, "updated": 0, "errors": []}
        by_name = {p.name: p for p in self.list()}

        for i, row in enumerate(rows):
            line = i + 2
            missing = missing_fields(row)
            if missing:
                results["errors"].append(f"Row {line}: Missing required fields ({', '.join(missing)})")
                continue
            # Blank cells leave the stored value alone
            row = {k: v for k, v in row.items() if v is not None}
            try:
                existing = by_name.get(str(row["name"]).strip())
                if existing is not None:
                    by_name[existing.name] = self.update(existing.id, row, acting_user_id)
                    results["updated"] += 1
                else:
                    created = self.create(row, acting_user_id)
                    by_name[created.name] = created
                    results["created"] += 1
            except (ValidationError, NotFound) as exc:
                detail = "; ".join(f"{d['field']}: {d['message']}" for d in getattr(exc, "details", None) or [])
                results["errors"].append(f"Row {line}: {exc.message}" + (f" ({detail})" if detail else ""))
        return results
