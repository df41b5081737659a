"""Admin-managed projects registry: table, schemas, role checks, repository."""
from .schemas import (
    ProjectCreate, ProjectUpdate, ProjectOut, ProjectFilters, ProjectType, ProjectStatus,
    REQUIRED_FIELDS, missing_fields,
)
from .auth import RoleChecker, StaticRoleChecker
from .repository import ProjectRepository, summarize
from .db import make_engine, make_session_factory, init_db
