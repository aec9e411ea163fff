def test_healthz(client):
    response = client.get("/v1/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "version": "1.0.0"}


def test_version_lists_models(client):
    data = client.get("/v1/version").json()
    assert data["name"] == "portfolio-api"
    assert data["admin_chat_model"] == "gemini-2.5-flash"
    assert data["public_chat_model"] == "gemini-2.0-flash-exp"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "HTTP_ERROR"
    assert response.json()["error"]["request_id"]
