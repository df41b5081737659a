from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from statewatch.api import dependencies
from statewatch.data import DataContext
from statewatch.main import create_app
from statewatch.projects import ProjectRepository, StaticRoleChecker, init_db, make_engine, make_session_factory

ADMIN = "admin-1"
VIEWER = "viewer-1"


def project_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "name": "Jambatan Sungai Klang",
        "state_id": "Selangor",
        "type": "construction",
        "status": "in-progress",
        "start_date": "2024-01-15",
        "end_date": "2025-06-30",
        "budget": 1_500_000,
        "disbursed": 250_000,
        "contractor": "Binaan Maju Sdn Bhd",
        "location": "Klang",
        "description": "Bridge replacement over Sungai Klang",
        "progress": 35,
        "planned_progress": 40,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def role_checker() -> StaticRoleChecker:
    return StaticRoleChecker(admin_ids={ADMIN})


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repo(engine, role_checker: StaticRoleChecker) -> ProjectRepository:
    return ProjectRepository(make_session_factory(engine), role_checker)


@pytest.fixture
def context() -> DataContext:
    return DataContext()


@pytest.fixture
def app(repo: ProjectRepository, context: DataContext):
    app = create_app()
    app.dependency_overrides[dependencies.get_repository] = lambda: repo
    app.dependency_overrides[dependencies.get_context] = lambda: context
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    # Not used as a context manager, so the lifespan (network fetches, real DB) never runs
    return TestClient(app)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-User-Id": ADMIN}


@pytest.fixture
def viewer_headers() -> dict[str, str]:
    return {"X-User-Id": VIEWER}
