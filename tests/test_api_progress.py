from conftest import register_and_login


def test_progress_requires_auth(client):
    assert client.get("/api/progress").status_code == 401
    assert client.post("/api/progress", json={"experimentId": 1}).status_code == 401
    assert client.patch("/api/progress/1/complete", json={"completed": True}).status_code == 401

    response = client.get("/api/progress", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_progress_is_null_before_first_interaction(client, auth_headers):
    response = client.get("/api/progress/1", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() is None


def test_upsert_creates_then_updates(client, auth_headers):
    created = client.post("/api/progress", json={"experimentId": 1, "notes": "first"}, headers=auth_headers).json()
    assert created["completed"] is False
    assert created["notes"] == "first"

    updated = client.post("/api/progress", json={"experimentId": 1, "completed": True}, headers=auth_headers).json()
    assert updated["id"] == created["id"]
    assert updated["completed"] is True
    assert updated["completedAt"] is not None
    assert updated["notes"] == "first"

    assert len(client.get("/api/progress", headers=auth_headers).json()) == 1


def test_upsert_validation(client, auth_headers):
    assert client.post("/api/progress", json={}, headers=auth_headers).status_code == 400
    assert client.post("/api/progress", json={"experimentId": "abc"}, headers=auth_headers).status_code == 400
    assert client.post("/api/progress", json={"experimentId": 0}, headers=auth_headers).status_code == 400
    assert client.post("/api/progress", json={"experimentId": -3}, headers=auth_headers).status_code == 400
    assert client.post("/api/progress", json={"experimentId": 1, "completed": "yes"}, headers=auth_headers).status_code == 400
    assert client.post("/api/progress", json={"experimentId": 999}, headers=auth_headers).status_code == 404


def test_notes_update_and_clear(client, auth_headers):
    response = client.patch("/api/progress/2/notes", json={"notes": "Mold after 3 days"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["notes"] == "Mold after 3 days"
    assert response.json()["completed"] is False

    response = client.patch("/api/progress/2/notes", json={"notes": ""}, headers=auth_headers)
    assert response.json()["notes"] == ""

    assert client.patch("/api/progress/2/notes", json={"notes": 42}, headers=auth_headers).status_code == 400
    assert client.patch("/api/progress/2/notes", json={}, headers=auth_headers).status_code == 400


def test_completion_toggle_keeps_notes(client, auth_headers):
    client.patch("/api/progress/3/notes", json={"notes": "Messy!"}, headers=auth_headers)

    done = client.patch("/api/progress/3/complete", json={"completed": True}, headers=auth_headers).json()
    assert done["completed"] is True
    assert done["completedAt"] is not None
    assert done["notes"] == "Messy!"

    undone = client.patch("/api/progress/3/complete", json={"completed": False}, headers=auth_headers).json()
    assert undone["completed"] is False
    assert undone["completedAt"] is None
    assert undone["notes"] == "Messy!"

    assert client.patch("/api/progress/3/complete", json={"completed": "true"}, headers=auth_headers).status_code == 400
    assert client.patch("/api/progress/abc/complete", json={"completed": True}, headers=auth_headers).status_code == 400


def test_progress_is_per_user(client, auth_headers):
    client.patch("/api/progress/1/complete", json={"completed": True}, headers=auth_headers)
    other = register_and_login(client, email="other@example.com")

    assert client.get("/api/progress", headers=other).json() == []
    assert client.get("/api/progress/1", headers=other).json() is None


def test_auth_user_endpoint(client, auth_headers):
    assert client.get("/api/auth/user").json() is None

    me = client.get("/api/auth/user", headers=auth_headers).json()
    assert me["email"] == "student@example.com"
    assert "hashedPassword" not in me
    assert client.get("/auth/me", headers=auth_headers).json()["role"] == "student"


def test_register_rejects_duplicate_email(client, auth_headers):
    response = client.post(
        "/auth/register",
        json={"email": "student@example.com", "password": "another1", "full_name": "Again"},
    )
    assert response.status_code == 400

    response = client.post("/auth/login", data={"username": "student@example.com", "password": "wrong-pass"})
    assert response.status_code == 401
