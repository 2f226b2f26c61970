import pytest

from conftest import WIKI_GIVENS, WIKI_SOLUTION
from flask_api import create_app


@pytest.fixture
def client():
    app = create_app({"TESTING": True})
    return app.test_client()


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True}


def test_hint(client):
    res = client.post("/hint", json={"type": "standard9x9", "givens": WIKI_GIVENS})
    assert res.status_code == 200
    body = res.get_json()
    assert body["has_hint"] is True
    assert body["action"] in ("PLACE", "ELIMINATE")
    assert body["actions"]
    assert body["cause"]


def test_analyze_valid_board(client):
    res = client.post("/analyze", json={"givens": WIKI_GIVENS, "solution": WIKI_SOLUTION})
    body = res.get_json()
    assert res.status_code == 200
    assert body["validation"]["ok"] is True
    assert body["solver"]["ok"] is True
    assert body["solver"]["grade"]
    assert body["mistakes"]["has_mistake"] is False


def test_analyze_duplicate(client):
    current = WIKI_GIVENS[:2] + "5" + WIKI_GIVENS[3:]
    res = client.post("/analyze", json={"givens": WIKI_GIVENS, "current": current})
    body = res.get_json()
    assert body["validation"]["ok"] is False
    assert body["duplicates"] == [{"r": 1, "c": 1}, {"r": 1, "c": 3}]


def test_analyze_mistake_hides_answer(client):
    current = WIKI_GIVENS[:2] + "1" + WIKI_GIVENS[3:]
    res = client.post("/analyze", json={"givens": WIKI_GIVENS, "current": current, "solution": WIKI_SOLUTION})
    body = res.get_json()
    assert body["mistakes"]["has_mistake"] is True
    assert body["mistakes"]["items"][0]["entered"] == "1"
    assert body["hint"]["action"] == "FIX_MISTAKE"
    assert "expected" not in body["mistakes"]["items"][0]


def test_generate(client):
    res = client.post("/generate", json={"type": "standard4x4", "seed": 5})
    assert res.status_code == 200
    body = res.get_json()
    assert body["type"] == "standard4x4"
    assert len(body["givens"]) == 16
    assert body["grade"]


def test_generate_exhausted(client):
    res = client.post("/generate", json={"type": "standard4x4", "givens_ratio": 0.0, "max_attempts": 2})
    assert res.status_code == 422
    assert "error" in res.get_json()


@pytest.mark.parametrize("payload", [
    {"givens": "123"},
    {"type": "hexagonal", "givens": WIKI_GIVENS},
    {"givens": WIKI_GIVENS, "current": "X" * 81},
    [1, 2],
    "standard9x9",
])
def test_bad_input_is_400(client, payload):
    res = client.post("/hint", json=payload)
    assert res.status_code == 400
    assert "error" in res.get_json()


def test_default_type_from_config():
    app = create_app({"TESTING": True, "DEFAULT_TYPE": "standard4x4"})
    res = app.test_client().post("/hint", json={"givens": "1.....1..1.....1"})
    assert res.status_code == 200
