from fastapi.testclient import TestClient

from auth import get_storage
from main import app


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Science Lab API"
    assert client.get("/health").json() == {"status": "healthy"}


def test_list_all_experiments_in_store_order(client):
    response = client.get("/api/experiments")
    assert response.status_code == 200
    body = response.json()
    assert [e["id"] for e in body] == list(range(1, 9))
    first = body[0]
    assert first["title"] == "Growing Beans: Watch Seeds Sprout"
    assert first["curriculumStage"] == "K-6"
    assert first["householdItemsOnly"] is True
    assert first["steps"][0]["stepNumber"] == 1


def test_filter_by_query_params(client):
    response = client.get("/api/experiments", params={"category": "Chemistry", "difficulty": "beginner"})
    assert [e["id"] for e in response.json()] == [3]

    response = client.get("/api/experiments", params={"curriculumStage": "7-10 Life Skills", "maxDuration": "20"})
    assert [e["id"] for e in response.json()] == [8]

    response = client.get("/api/experiments", params={"searchQuery": "pendulum", "householdItemsOnly": "true"})
    assert [e["id"] for e in response.json()] == [6]


def test_filter_by_curriculum_unit(client):
    response = client.get("/api/experiments", params={"curriculumUnitId": "comp-a-t2"})
    assert [e["id"] for e in response.json()] == [2]

    response = client.get("/api/experiments", params={"curriculumUnitId": "does-not-exist"})
    assert response.status_code == 200
    assert response.json() == []


def test_empty_params_are_ignored(client):
    response = client.get("/api/experiments", params={"searchQuery": "", "category": "", "householdItemsOnly": "false"})
    assert len(response.json()) == 8


def test_malformed_filters_rejected(client):
    for params in (
        {"category": "Astrology"},
        {"difficulty": "impossible"},
        {"maxDuration": "soon"},
        {"maxDuration": "-5"},
        {"householdItemsOnly": "maybe"},
    ):
        response = client.get("/api/experiments", params=params)
        assert response.status_code == 400, params
        assert response.json()["detail"] == "Invalid filter parameters"


def test_featured_returns_first_six(client):
    response = client.get("/api/experiments/featured")
    assert [e["id"] for e in response.json()] == [1, 2, 3, 4, 5, 6]


def test_get_experiment_by_id(client):
    assert client.get("/api/experiments/5").json()["title"] == "Make a Rainbow with Sunlight"

    response = client.get("/api/experiments/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Experiment not found"

    assert client.get("/api/experiments/abc").status_code == 400


def test_related_experiments(client):
    # two from the same category, then one from the same stage
    response = client.get("/api/experiments/related/1")
    assert [e["id"] for e in response.json()] == [2, 3]

    assert client.get("/api/experiments/related/999").json() == []


def test_experiment_curriculum_units(client):
    response = client.get("/api/experiments/1/curriculum")
    assert [u["unitId"] for u in response.json()] == ["es1-t1", "s1-t1"]


def test_curriculum_routes(client):
    units = client.get("/api/curriculum").json()
    assert len(units) == 13
    assert [(u["stage"], u["term"]) for u in units] == sorted((u["stage"], u["term"]) for u in units)

    stage = client.get("/api/curriculum/stage/Stage 1").json()
    assert [u["unitId"] for u in stage] == ["s1-t1", "s1-t3", "s1-t4", "s1-t5", "s1-t6"]

    unit = client.get("/api/curriculum/comp-e-t3").json()
    assert unit["component"] == "Component E"
    assert unit["outcomes"] == ["SCLS6-8PW"]

    response = client.get("/api/curriculum/zz-t9")
    assert response.status_code == 404


def test_out_of_range_ids_on_database_backend(db_client):
    response = db_client.get("/api/experiments/99999999999999999999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Experiment not found"

    assert db_client.get("/api/experiments/related/99999999999999999999").json() == []
    assert db_client.get("/api/quizzes/99999999999999999999/questions").json() == []

    response = db_client.get("/api/experiments", params={"maxDuration": "100000000000000000000"})
    assert response.status_code == 200
    assert len(response.json()) == 8


class BrokenStorage:
    def get_all_experiments(self, filters=None):
        raise RuntimeError("connection pool exhausted")


def test_unexpected_failure_returns_opaque_500():
    app.dependency_overrides[get_storage] = lambda: BrokenStorage()
    try:
        response = TestClient(app, raise_server_exceptions=False).get("/api/experiments")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "connection pool" not in response.text
