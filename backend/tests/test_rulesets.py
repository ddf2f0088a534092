import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from scoreforge.main import app


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def test_create_list_and_use_ruleset(client):
    resp = client.post(
        "/api/v0/rulesets",
        json={"sport_id": "padel", "name": "Golden point", "config": {"goldenPoint": True}},
    )
    assert resp.status_code == 200
    rid = resp.json()["id"]

    listed = client.get("/api/v0/rulesets", params={"sport": "padel"}).json()
    assert [r["id"] for r in listed] == [rid]

    match = client.post("/api/v0/matches", json={"sport": "padel", "rulesetId": rid})
    assert match.status_code == 200
    detail = client.get(f"/api/v0/matches/{match.json()['id']}").json()
    assert detail["rulesetId"] == rid
    assert detail["config"]["useAdvantage"] is False


def test_delete_unused_ruleset(client):
    rid = client.post(
        "/api/v0/rulesets", json={"sport_id": "tennis", "name": "Std", "config": {}}
    ).json()["id"]
    assert client.delete(f"/api/v0/rulesets/{rid}").status_code == 204
    assert client.get("/api/v0/rulesets", params={"sport": "tennis"}).json() == []


def test_rejects_invalid_ruleset_config(client):
    resp = client.post(
        "/api/v0/rulesets",
        json={"sport_id": "volleyball", "name": "Bad", "config": {"goldenPoint": True}},
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "scoring_mode_invalid"


def test_delete_missing_ruleset(client):
    resp = client.delete("/api/v0/rulesets/nope")
    assert resp.status_code == 404
    assert resp.json()["code"] == "ruleset_not_found"
