"""
tests/test_health.py -- Integration tests for GET /api/health.

Covers:
  - 200 response with status and version fields
  - No session required
"""

from __future__ import annotations


def test_health_returns_200(lab):
    resp = lab.client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_health_no_session_required(lab):
    assert not lab.client.cookies
    resp = lab.client.get("/api/health")
    assert resp.status_code == 200
