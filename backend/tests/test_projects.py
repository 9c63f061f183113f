from uuid import uuid4

from conftest import bearer, register


def test_create_project_applies_defaults(client, auth_headers) -> None:
    response = client.post("/api/projects", json={"name": "Landing page"}, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Landing page"
    assert body["description"] == ""
    assert body["zoom"] == 1.0
    assert body["panX"] == 0.0
    assert body["panY"] == 0.0
    assert body["aiModel"] == "auto"


def test_create_project_rejects_blank_name(client, auth_headers) -> None:
    response = client.post("/api/projects", json={"name": "   "}, headers=auth_headers)
    assert response.status_code == 422
    assert response.json() == {"error": "Project name is required"}


def test_list_projects_only_returns_own(client, auth_headers) -> None:
    client.post("/api/projects", json={"name": "Mine"}, headers=auth_headers)
    other = bearer(register(client, email="bob@example.com")["accessToken"])
    client.post("/api/projects", json={"name": "Bob's"}, headers=other)

    response = client.get("/api/projects", headers=auth_headers)

    assert response.status_code == 200
    assert [project["name"] for project in response.json()] == ["Mine"]


def test_update_project_is_partial(client, auth_headers, project_id) -> None:
    response = client.put(
        f"/api/projects/{project_id}",
        json={"zoom": 1.5, "panX": -40},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Demo"
    assert body["zoom"] == 1.5
    assert body["panX"] == -40
    assert body["panY"] == 0.0


def test_delete_project_cascades_to_canvas(client, auth_headers, project_id) -> None:
    client.post(
        f"/api/projects/{project_id}/nodes",
        json={"clientId": "n1", "type": "idea", "title": "Idea", "x": 0, "y": 0, "width": 100, "height": 50},
        headers=auth_headers,
    )

    response = client.delete(f"/api/projects/{project_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Project deleted"}

    assert client.get(f"/api/projects/{project_id}", headers=auth_headers).status_code == 404
    assert client.get(f"/api/projects/{project_id}/canvas", headers=auth_headers).status_code == 404


def test_other_users_project_looks_missing(client, auth_headers, project_id) -> None:
    intruder = bearer(register(client, email="mallory@example.com")["accessToken"])

    foreign = client.get(f"/api/projects/{project_id}", headers=intruder)
    missing_id = uuid4()
    missing = client.get(f"/api/projects/{missing_id}", headers=intruder)

    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == {"error": f"Project {project_id} not found"}
    assert client.delete(f"/api/projects/{project_id}", headers=intruder).status_code == 404
    assert client.get(f"/api/projects/{project_id}", headers=auth_headers).status_code == 200


def test_projects_require_authentication(client) -> None:
    assert client.get("/api/projects").status_code == 401
    assert client.post("/api/projects", json={"name": "x"}).status_code == 401
