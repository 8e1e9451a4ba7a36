import json

import httpx
import pytest
from fastapi.testclient import TestClient

from otp_relay.config import Settings
from otp_relay.main import create_app


class UpstreamStub:
    """Stands in for SendGrid / Supabase: records every outbound request and answers with a canned response."""

    def __init__(self):
        self.calls: list[httpx.Request] = []
        self.status = 202
        self.text = ""
        self.json_body = None
        self.exc = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.exc is not None:
            raise self.exc
        if self.json_body is not None:
            return httpx.Response(self.status, json=self.json_body)
        return httpx.Response(self.status, text=self.text)

    def payloads(self) -> list:
        return [json.loads(r.content) for r in self.calls]


def make_settings(**overrides) -> Settings:
    values = dict(
        ENV="test",
        SENDGRID_API_KEY="SG.test-key",
        SENDER_EMAIL="security@example.test",
        SENDER_NAME="HydroSentinel Security",
        SUPABASE_URL="https://proj.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="service-role-key",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def make_client(upstream):
    def _make(**overrides) -> TestClient:
        app = create_app(make_settings(**overrides), transport=httpx.MockTransport(upstream))
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def settings_factory():
    return make_settings
