"""End-to-end tests through the FastAPI app with an in-memory store."""

import pytest
from fastapi.testclient import TestClient

from conftest import COVER_LETTER
from internhub.api.dependencies import get_store
from internhub.core.auth import create_access_token
from internhub.main import app


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


PROJECT_BODY = {
    "title": "Data Pipeline Research",
    "description": "Build and evaluate streaming data pipelines.",
    "department": "CS",
    "category": "Data Engineering",
    "required_skills": ["Python", "SQL", "Docker"],
}


def test_full_review_flow(client, professor, student):
    resp = client.post("/api/projects", json=PROJECT_BODY, headers=auth(professor))
    assert resp.status_code == 201
    project_id = resp.json()["id"]

    resp = client.post(
        "/api/applications",
        json={"project_id": project_id, "cover_letter": COVER_LETTER},
        headers=auth(student),
    )
    assert resp.status_code == 201
    application_id = resp.json()["id"]
    assert resp.json()["status"] == "pending"

    resp = client.get(f"/api/recommendations/candidates/{project_id}", headers=auth(professor))
    assert resp.status_code == 200
    assert resp.json()["candidates"][0]["match_score"] == 67

    resp = client.put(f"/api/applications/{application_id}/approve", headers=auth(professor))
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"

    resp = client.put(f"/api/applications/{application_id}/approve", headers=auth(professor))
    assert resp.status_code == 409
    assert resp.json()["code"] == "not-pending"

    resp = client.delete(f"/api/applications/{application_id}", headers=auth(student))
    assert resp.status_code == 409

    project = client.get(f"/api/projects/{project_id}").json()
    assert project["current_interns"] == [student.id]
    assert project["applicants"] == []

    stats = client.get("/api/applications/stats", headers=auth(professor)).json()
    assert stats["approved"] == 1 and stats["total_interns"] == 1


def test_reject_with_reason(client, professor, student, project):
    application_id = client.post(
        "/api/applications",
        json={"project_id": project.id, "cover_letter": COVER_LETTER},
        headers=auth(student),
    ).json()["id"]

    resp = client.put(
        f"/api/applications/{application_id}/reject",
        json={"reason": "Looking for more Docker experience"},
        headers=auth(professor),
    )
    assert resp.status_code == 200
    assert resp.json()["rejection_reason"] == "Looking for more Docker experience"

    mine = client.get("/api/applications/mine", headers=auth(student)).json()
    assert mine["total"] == 1 and mine["applications"][0]["status"] == "rejected"


def test_withdraw_pending(client, student, project):
    application_id = client.post(
        "/api/applications",
        json={"project_id": project.id, "cover_letter": COVER_LETTER},
        headers=auth(student),
    ).json()["id"]

    resp = client.delete(f"/api/applications/{application_id}", headers=auth(student))
    assert resp.status_code == 200
    assert client.get(f"/api/projects/{project.id}").json()["applicants"] == []


def test_error_mapping(client, professor, other_professor, student, project):
    resp = client.post(
        "/api/applications",
        json={"project_id": project.id, "cover_letter": "Too short."},
        headers=auth(student),
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid"

    resp = client.post(
        "/api/applications",
        json={"project_id": "6500000000000000000000aa", "cover_letter": COVER_LETTER},
        headers=auth(student),
    )
    assert resp.status_code == 404

    application_id = client.post(
        "/api/applications",
        json={"project_id": project.id, "cover_letter": COVER_LETTER},
        headers=auth(student),
    ).json()["id"]

    resp = client.put(f"/api/applications/{application_id}/approve", headers=auth(other_professor))
    assert resp.status_code == 403

    resp = client.put(f"/api/applications/{application_id}/approve", headers=auth(student))
    assert resp.status_code == 403


def test_authentication_required(client, project):
    assert client.get("/api/applications/mine").status_code in (401, 403)
    resp = client.get("/api/applications/mine", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_token_for_deleted_user(client):
    resp = client.get(
        "/api/applications/mine",
        headers={"Authorization": f"Bearer {create_access_token('6500000000000000000000aa')}"},
    )
    assert resp.status_code == 401


def test_recommendation_endpoints(client, professor, student, project, new_project):
    new_project(professor, required_skills=["Rust"])

    recs = client.get("/api/recommendations/projects", headers=auth(student)).json()
    assert [r["project"]["id"] for r in recs["recommendations"]] == [project.id]
    assert recs["message"] is None

    top = client.get("/api/recommendations/projects/top?limit=0", headers=auth(student)).json()
    assert top["total"] == 1

    gap = client.get(f"/api/recommendations/skills/gap/{project.id}", headers=auth(student)).json()
    assert gap["analysis"]["missing_skills"] == ["Docker"]


def test_apply_to_project_endpoint(client, student, project):
    resp = client.post(f"/api/projects/{project.id}/apply", headers=auth(student))
    assert resp.status_code == 200
    assert resp.json()["applicants"] == [student.id]

    resp = client.post(f"/api/projects/{project.id}/apply", headers=auth(student))
    assert resp.status_code == 409


def test_project_listing(client, professor, project):
    resp = client.get("/api/projects", params={"skills": "docker,SQL", "status": "open"})
    body = resp.json()
    assert resp.status_code == 200
    assert body["total"] == 1

    resp = client.get("/api/projects/mine", headers=auth(professor))
    assert [p["id"] for p in resp.json()] == [project.id]


def test_project_stats_overview(client, professor, project, new_project):
    new_project(professor, category="Robotics", required_skills=["C++", "Python"])

    resp = client.get("/api/projects/stats/overview")

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert body["by_status"]["open"] == 2
    assert body["top_skills"][0] == {"value": "Python", "count": 2}


def test_error_body_is_documented(client):
    resp = client.get("/api/projects/6500000000000000000000aa")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Project not found", "code": "not-found"}

    operation = client.get("/openapi.json").json()["paths"]["/api/projects/{project_id}"]["get"]
    schema = operation["responses"]["404"]["content"]["application/json"]["schema"]
    assert schema["$ref"].endswith("/ErrorResponse")
