from __future__ import annotations

import pytest


class TestPayloadValidation:
    @pytest.mark.parametrize("path", ["/signup", "/login", "/refresh-token", "/log"])
    def test_non_object_body_is_400(self, client, path):
        resp = client.post(path, json=["not", "an", "object"])
        assert resp.status_code == 400
        assert resp.json() == {"error_code": "VALIDATION_FAILED", "message": "Invalid request payload"}

    def test_wrong_field_type_is_400(self, client):
        resp = client.post("/login", json={"username": 42, "password": "x"})
        assert resp.status_code == 400

    def test_error_body_has_no_internal_detail(self, client):
        resp = client.post("/refresh-token", json={"token": "garbage"})
        assert set(resp.json()) == {"error_code", "message"}

    def test_get_not_allowed_on_login(self, client):
        resp = client.get("/login")
        assert resp.status_code == 405

    def test_cors_preflight(self, client):
        resp = client.options(
            "/login",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
        )
        assert resp.status_code == 200
        assert "access-control-allow-origin" in resp.headers
