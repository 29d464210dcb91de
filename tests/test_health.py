# tests/test_health.py
"""Health endpoint and the JSON error envelope for unmatched routes and crashes."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
import pytest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from requisition import main
from requisition.main import app, global_exception_handler


class TestHealth:
    def test_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "OK"
        assert body["database"] == "ok"
        assert "timestamp" in body

    def test_database_down(self, client, db_session):
        with patch.object(db_session, "execute", side_effect=OperationalError("SELECT 1", {}, Exception("gone"))):
            body = client.get("/api/health").json()
        assert body["status"] == "degraded"
        assert body["database"] == "error"


class TestErrorEnvelope:
    def test_unknown_route(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.json() == {"error": True, "message": "API endpoint not found"}

    def test_unhandled_exception_is_500(self, client, admin, auth_headers):
        crash_client = TestClient(app, raise_server_exceptions=False)
        with patch("requisition.services.vehicle_service.list_vehicles", side_effect=RuntimeError("kaboom")):
            resp = crash_client.get("/api/vehicles", headers=auth_headers(admin))
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] is True
        assert body["message"] == "Internal server error"
        assert "kaboom" in body["stack"]

    @pytest.mark.asyncio
    async def test_stack_hidden_in_production(self):
        request = MagicMock()
        request.url.path = "/api/vehicles"
        with patch.object(main.settings, "ENVIRONMENT", "production"):
            resp = await global_exception_handler(request, RuntimeError("secret detail"))
        body = json.loads(resp.body)
        assert resp.status_code == 500
        assert "stack" not in body
        assert "secret detail" not in resp.body.decode()
