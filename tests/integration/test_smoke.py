"""Smoke checks against a running server; set SMOKE_BASE_URL to enable."""

import os

import httpx
import pytest

BASE_URL = os.getenv("SMOKE_BASE_URL", "")

pytestmark = pytest.mark.skipif(not BASE_URL, reason="SMOKE_BASE_URL not set")


def test_health_smoke():
    resp = httpx.get(f"{BASE_URL}/health", timeout=5.0)
    assert resp.status_code == 200


def test_metrics_smoke():
    resp = httpx.get(f"{BASE_URL}/metrics", timeout=5.0)
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
