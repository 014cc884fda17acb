from fastapi.testclient import TestClient

from api.main import app


def test_health_endpoints():
    client = TestClient(app)
    assert client.get("/").json() == {"status": "ok", "service": "Cafe Finder API"}
    assert client.get("/health").json() == {"status": "healthy"}


def test_cafe_routes_are_mounted():
    paths = {route.path for route in app.routes}
    assert "/cafes" in paths
    assert "/sessions/{session_id}/find" in paths
