from __future__ import annotations

import io

from fastapi.testclient import TestClient
from openpyxl import Workbook, load_workbook

from statewatch.excel import XLSX_MEDIA_TYPE
from statewatch.projects import REQUIRED_FIELDS
from conftest import project_payload

URL = "/api/projects"


def _create(client: TestClient, headers: dict, **overrides) -> dict:
    resp = client.post(URL, json=project_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def _count(client: TestClient) -> int:
    return client.get(URL).json()["count"]


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def test_create_returns_201(client: TestClient, admin_headers: dict) -> None:
    resp = client.post(URL, json=project_payload(), headers=admin_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Project created successfully"
    assert body["data"]["state_id"] == "selangor"
    assert body["data"]["status"] == "in-progress"


def test_create_without_identity_is_401(client: TestClient) -> None:
    resp = client.post(URL, json=project_payload())
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized: Please sign in"}
    assert _count(client) == 0


def test_create_missing_budget_is_400_and_writes_nothing(client: TestClient, admin_headers: dict) -> None:
    payload = project_payload()
    del payload["budget"]
    resp = client.post(URL, json=payload, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields", "required": REQUIRED_FIELDS}
    assert _count(client) == 0


def test_create_zero_budget_is_accepted(client: TestClient, admin_headers: dict) -> None:
    assert _create(client, admin_headers, budget=0, progress=0)["budget"] == 0


def test_create_by_non_admin_is_403(client: TestClient, viewer_headers: dict) -> None:
    resp = client.post(URL, json=project_payload(), headers=viewer_headers)
    assert resp.status_code == 403
    assert resp.json()["error"].startswith("Unauthorized:")
    assert _count(client) == 0


def test_create_invalid_value_is_400(client: TestClient, admin_headers: dict) -> None:
    resp = client.post(URL, json=project_payload(type="airport"), headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["details"][0]["field"] == "type"


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

def test_list_and_filter(client: TestClient, admin_headers: dict) -> None:
    _create(client, admin_headers, name="A", state_id="johor", status="planning")
    _create(client, admin_headers, name="B", state_id="johor", status="completed")
    _create(client, admin_headers, name="C", state_id="kedah", status="completed")

    body = client.get(URL).json()
    assert body["success"] is True
    assert body["count"] == 3
    assert [p["name"] for p in body["data"]] == ["C", "B", "A"]

    filtered = client.get(URL, params={"state_id": "johor", "status": "completed"}).json()
    assert [p["name"] for p in filtered["data"]] == ["B"]
    assert filtered["count"] == 1


def test_list_with_bad_filter_is_400(client: TestClient) -> None:
    assert client.get(URL, params={"type": "airport"}).status_code == 400
    assert client.get(URL, params={"start_date_from": "yesterday"}).status_code == 400


def test_get_by_id(client: TestClient, admin_headers: dict) -> None:
    created = _create(client, admin_headers)
    resp = client.get(f"{URL}/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["data"] == created


def test_get_unknown_id_is_404(client: TestClient) -> None:
    resp = client.get(f"{URL}/missing")
    assert resp.status_code == 404
    assert "error" in resp.json()


def test_stats(client: TestClient, admin_headers: dict) -> None:
    _create(client, admin_headers, name="A", budget=100, progress=20)
    _create(client, admin_headers, name="B", budget=300, progress=30, type="machinery")
    body = client.get(f"{URL}/stats").json()
    assert body["success"] is True
    assert body["data"]["total_projects"] == 2
    assert body["data"]["total_budget"] == 400
    assert body["data"]["average_progress"] == 25
    assert body["data"]["by_type"] == {"construction": 1, "machinery": 1}


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

def test_update_without_identity_is_401_and_row_unchanged(client: TestClient, admin_headers: dict) -> None:
    created = _create(client, admin_headers)
    resp = client.put(f"{URL}/{created['id']}", json={"name": "Renamed"})
    assert resp.status_code == 401
    current = client.get(f"{URL}/{created['id']}").json()["data"]
    assert current["name"] == created["name"]
    assert current["updated_at"] == created["updated_at"]


def test_update_by_admin(client: TestClient, admin_headers: dict) -> None:
    created = _create(client, admin_headers)
    resp = client.put(f"{URL}/{created['id']}", json={"progress": 80}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Project updated successfully"
    assert body["data"]["progress"] == 80
    assert body["data"]["name"] == created["name"]


def test_update_status_codes(client: TestClient, admin_headers: dict, viewer_headers: dict) -> None:
    created = _create(client, admin_headers)
    url = f"{URL}/{created['id']}"
    assert client.put(url, json={"budget": -1}, headers=admin_headers).status_code == 400
    assert client.put(url, json={"budget": 5}, headers=viewer_headers).status_code == 403
    assert client.put(f"{URL}/missing", json={"budget": 5}, headers=admin_headers).status_code == 404


def test_delete_twice(client: TestClient, admin_headers: dict) -> None:
    created = _create(client, admin_headers)
    first = client.delete(f"{URL}/{created['id']}", headers=admin_headers)
    assert first.status_code == 200
    assert first.json()["success"] is True
    assert client.delete(f"{URL}/{created['id']}", headers=admin_headers).status_code == 404


def test_delete_requires_admin(client: TestClient, admin_headers: dict, viewer_headers: dict) -> None:
    created = _create(client, admin_headers)
    assert client.delete(f"{URL}/{created['id']}").status_code == 401
    assert client.delete(f"{URL}/{created['id']}", headers=viewer_headers).status_code == 403
    assert _count(client) == 1


# ---------------------------------------------------------------------------
# Excel export / import
# ---------------------------------------------------------------------------

def test_export_requires_identity(client: TestClient) -> None:
    assert client.get(f"{URL}/export-excel").status_code == 401


def test_export_streams_workbook(client: TestClient, admin_headers: dict, viewer_headers: dict) -> None:
    _create(client, admin_headers, name="A")
    _create(client, admin_headers, name="B")

    resp = client.get(f"{URL}/export-excel", headers=viewer_headers)

    assert resp.status_code == 200
    assert resp.headers["content-type"] == XLSX_MEDIA_TYPE
    disposition = resp.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="projects_export_')
    assert disposition.endswith('.xlsx"')

    ws = load_workbook(io.BytesIO(resp.content))["Projects"]
    assert ws.max_row == 3
    assert [ws.cell(row=r, column=1).value for r in (2, 3)] == ["B", "A"]


def _sheet(rows: list[dict]) -> bytes:
    headers = list(project_payload())
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for row in rows:
        ws.append([row.get(h) for h in headers])
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _upload(client: TestClient, content: bytes, headers: dict):
    return client.post(
        f"{URL}/upload-excel",
        files={"file": ("projects.xlsx", content, XLSX_MEDIA_TYPE)},
        headers=headers,
    )


def test_upload_creates_then_updates(client: TestClient, admin_headers: dict) -> None:
    content = _sheet([project_payload(name="A"), project_payload(name="B", budget=10)])

    first = _upload(client, content, admin_headers)
    assert first.status_code == 200
    assert first.json() == {
        "success": True,
        "message": "Processed 2 rows",
        "results": {"created": 2, "updated": 0, "errors": []},
    }

    second = _upload(client, _sheet([project_payload(name="B", budget=20)]), admin_headers)
    assert second.json()["results"] == {"created": 0, "updated": 1, "errors": []}

    projects = {p["name"]: p for p in client.get(URL).json()["data"]}
    assert len(projects) == 2
    assert projects["B"]["budget"] == 20


def test_upload_reports_row_errors(client: TestClient, admin_headers: dict) -> None:
    content = _sheet([project_payload(name="A"), project_payload(name="B", contractor=None)])
    results = _upload(client, content, admin_headers).json()["results"]
    assert results["created"] == 1
    assert len(results["errors"]) == 1
    assert results["errors"][0].startswith("Row 3:")


def test_exported_workbook_imports_back_as_updates(client: TestClient, admin_headers: dict) -> None:
    _create(client, admin_headers, name="A", end_date=None, location=None)
    _create(client, admin_headers, name="B")
    exported = client.get(f"{URL}/export-excel", headers=admin_headers).content

    results = _upload(client, exported, admin_headers).json()["results"]

    assert results == {"created": 0, "updated": 2, "errors": []}
    assert _count(client) == 2


def test_upload_status_codes(client: TestClient, admin_headers: dict, viewer_headers: dict) -> None:
    content = _sheet([project_payload()])
    assert _upload(client, content, {}).status_code == 401
    assert _upload(client, content, viewer_headers).status_code == 403
    assert client.post(f"{URL}/upload-excel", headers=admin_headers).json() == {"error": "No file uploaded"}
    assert _upload(client, b"not a spreadsheet", admin_headers).status_code == 400
    assert _count(client) == 0
