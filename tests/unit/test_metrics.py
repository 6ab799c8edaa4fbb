import pytest
from httpx import ASGITransport, AsyncClient


@pytest.mark.anyio
async def test_metrics_endpoint(test_app):
    app, _ = test_app
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        await ac.get("/health")
        resp = await ac.get("/metrics")
        assert resp.status_code == 200
        assert "http_requests_total" in resp.text


@pytest.mark.anyio
async def test_verification_metrics_are_exported(test_app):
    app, sender = test_app
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        await ac.post(
            "/api/verification",
            json={"action": "send", "email": "m@example.com", "nickname": "M"},
        )
        await ac.post(
            "/api/verification",
            json={"action": "verify", "email": "m@example.com", "code": sender.sent[-1]["code"]},
        )
        resp = await ac.get("/metrics")
    assert 'verification_challenges_issued_total{flow="code"}' in resp.text
    assert 'verification_attempts_total{flow="code",result="success"}' in resp.text
