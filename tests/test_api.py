from fastapi.testclient import TestClient

from face_auth.api.server import create_app
from conftest import FakeLandmarkSource, landmarks_from_vector


FACE = [1, 0, 0, 0, 1, 0]


def test_enroll_and_authenticate_over_http(make_session):
    source = FakeLandmarkSource(default=landmarks_from_vector(FACE))
    session = make_session(source=source)
    with TestClient(create_app(session=session)) as client:
        r = client.post("/enroll")
        assert r.status_code == 409
        assert r.json()["error"] == "SessionNotReady"

        r = client.post("/session/start")
        assert r.status_code == 200
        assert r.json()["state"] == "detecting"
        assert r.json()["frame_width"] == 6

        r = client.post("/authenticate")
        assert r.status_code == 404

        r = client.post("/enroll")
        assert r.status_code == 200
        assert r.json() == {"enrolled": True, "features": 6}

        r = client.post("/authenticate")
        assert r.status_code == 200
        body = r.json()
        assert body["accepted"] is True
        assert abs(body["score"] - 1.0) < 1e-9
        assert client.get("/session").json()["last_score"] == body["score"]

        source.default = None
        assert client.post("/authenticate").status_code == 422

        assert client.delete("/template").json() == {"cleared": True}
        assert client.post("/session/stop").json()["state"] == "idle"
    assert source.closed
