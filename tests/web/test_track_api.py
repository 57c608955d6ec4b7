"""Track analysis endpoints."""

from __future__ import annotations

from tests.web.conftest import make_track_payload

_OCTAGON = [(6, 2), (44, 2), (48, 6), (48, 29), (44, 33), (6, 33), (2, 29), (2, 6)]


def test_default_analysis(client):
    resp = client.get("/api/track/analysis")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "default"
    assert data["racing_direction"] == "counter-clockwise"
    assert len(data["racing_line"]) == 21
    assert len(data["checkpoints"]) == 4
    assert {z["name"] for z in data["safe_zones"]} == {"left", "bottom", "right", "top"}


def test_waypoints_use_editor_field_names(client):
    wp = client.get("/api/track/analysis").json()["racing_line"][0]
    assert wp["pos"] == {"x": 5, "y": 20}
    assert wp["targetSpeed"] == 3
    assert wp["cornerType"] == "straight"


def test_analyze_posted_track(client):
    resp = client.post("/api/track/analyze", json=make_track_payload(outer=_OCTAGON, name="octagon"))
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "octagon"
    kinds = [wp["cornerType"] for wp in data["racing_line"]]
    assert kinds.count("apex") == 8


def test_reversed_listing_races_clockwise(client):
    payload = make_track_payload(outer=[(2, 33), (48, 33), (48, 2), (2, 2)])
    data = client.post("/api/track/analyze", json=payload).json()
    assert data["racing_direction"] == "clockwise"


def test_posted_racing_line_is_used(client):
    payload = make_track_payload()
    payload["racing_line"] = {
        "waypoints": [
            {"pos": {"x": 5, "y": 20}, "targetSpeed": 3},
            {"pos": {"x": 25, "y": 29}, "targetSpeed": 4, "safeZone": "bottom"},
        ]
    }
    data = client.post("/api/track/analyze", json=payload).json()
    assert [wp["pos"] for wp in data["racing_line"]] == [{"x": 5, "y": 20}, {"x": 25, "y": 29}]


def test_degenerate_track_is_422(client):
    payload = make_track_payload(outer=[(0, 0), (10, 0), (20, 0)])
    resp = client.post("/api/track/analyze", json=payload)
    assert resp.status_code == 422
    assert "zero area" in resp.json()["detail"]


def test_too_few_vertices_is_422(client):
    payload = make_track_payload(outer=[(0, 0), (10, 0)])
    assert client.post("/api/track/analyze", json=payload).status_code == 422
