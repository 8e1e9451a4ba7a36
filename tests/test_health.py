from otp_relay.observability.metrics import REGISTRY


def test_health_reports_configured_providers(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["providers"] == {"delete_otp": True, "risk_otp": True, "auth_otp": True}


def test_health_degraded_when_credentials_missing(make_client):
    client = make_client(SENDGRID_API_KEY=None)

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["providers"]["delete_otp"] is False
    assert body["providers"]["auth_otp"] is True


def test_liveness(client):
    assert client.get("/health/liveness").json() == {"alive": True}


def _dispatch_count(variant: str, outcome: str) -> float:
    return REGISTRY.get_sample_value("otp_dispatch_total", {"variant": variant, "outcome": outcome}) or 0.0


def test_metrics_count_dispatch_outcomes(client, upstream):
    upstream.status = 500
    upstream.text = "boom"
    before = _dispatch_count("risk_otp", "upstream_error")

    client.post("/send-risk-otp", json={"email": "a@b.com", "otp": "1"})
    resp = client.get("/metrics")

    assert resp.status_code == 200
    assert "otp_dispatch_total" in resp.text
    assert _dispatch_count("risk_otp", "upstream_error") == before + 1


def test_metrics_disabled(make_client):
    client = make_client(METRICS_ENABLED=False)
    assert client.get("/metrics").status_code == 404
