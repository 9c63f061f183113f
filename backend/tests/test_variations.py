from uuid import uuid4

from conftest import bearer, register


def _batch(source: str = "n1", labels=("Minimal", "Bold")) -> dict:
    return {
        "sourceNodeClientId": source,
        "variations": [
            {"label": label, "previewHtml": f"<section>{label}</section>", "category": "hero"}
            for label in labels
        ],
    }


def test_save_and_list_variations(client, auth_headers, project_id) -> None:
    url = f"/api/projects/{project_id}/variations"

    response = client.post(url, json=_batch(), headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Variations saved", "count": 2}

    listed = client.get(url, headers=auth_headers).json()
    assert sorted(v["label"] for v in listed) == ["Bold", "Minimal"]
    assert all(v["sourceNodeClientId"] == "n1" for v in listed)
    assert all(v["code"] == "" and v["description"] == "" for v in listed)


def test_save_variations_rejects_unknown_category(client, auth_headers, project_id) -> None:
    payload = {"sourceNodeClientId": "n1", "variations": [{"label": "x", "category": "sidebar"}]}
    response = client.post(f"/api/projects/{project_id}/variations", json=payload, headers=auth_headers)

    assert response.status_code == 422
    assert client.get(f"/api/projects/{project_id}/variations", headers=auth_headers).json() == []


def test_delete_variation(client, auth_headers, project_id) -> None:
    url = f"/api/projects/{project_id}/variations"
    client.post(url, json=_batch(labels=("Only",)), headers=auth_headers)
    variation_id = client.get(url, headers=auth_headers).json()[0]["id"]

    response = client.delete(f"{url}/{variation_id}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(url, headers=auth_headers).json() == []

    again = client.delete(f"{url}/{variation_id}", headers=auth_headers)
    assert again.status_code == 404


def test_delete_unknown_variation_is_not_found(client, auth_headers, project_id) -> None:
    missing = uuid4()
    response = client.delete(f"/api/projects/{project_id}/variations/{missing}", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": f"Variation {missing} not found"}


def test_variations_of_another_user_are_hidden(client, auth_headers, project_id) -> None:
    client.post(f"/api/projects/{project_id}/variations", json=_batch(), headers=auth_headers)
    intruder = bearer(register(client, email="mallory@example.com")["accessToken"])

    response = client.get(f"/api/projects/{project_id}/variations", headers=intruder)
    assert response.status_code == 404
