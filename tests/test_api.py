"""Tests for the optional REST API."""

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient  # noqa: E402

from steam_crawler.apis.app import app  # noqa: E402


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_crawl(client, page, fake_store):
    store = fake_store({
        77: page("Soundtrack", prices=None, links=[400]),
        400: page("Portal", prices=["9,75€"]),
    })

    with store.patch():
        resp = client.post("/crawl", json={"seeds": [77], "count": 5})

    assert resp.status_code == 200
    body = resp.json()
    assert body["complete"] is True
    assert body["skipped"] == [77]
    assert body["products"] == [{"id": 400, "name": "Portal", "tags": ["Puzzle", "Singleplayer"], "price": 9.75}]


def test_crawl_requires_exactly_one_policy(client):
    resp = client.post("/crawl", json={"seeds": [400], "count": 3, "duration": 10})
    assert resp.status_code == 422
