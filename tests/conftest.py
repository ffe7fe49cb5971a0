"""Pytest shared fixtures."""
import json
import pathlib
import sys
from datetime import datetime, timezone
from types import SimpleNamespace

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from appreg.core.models import (
    ApplicationRecord,
    ClientSecret,
    Credential,
    ProvisioningRequest,
)
from scripts import audit


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code: int = 200, url: str = "https://graph.test/v1.0"):
        self._payload = payload
        self.status_code = status_code
        self.url = url
        self.text = json.dumps(payload) if payload is not None else ""

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


@pytest.fixture
def stub_response():
    return StubResponse


@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Fail any test that reaches the network through requests."""

    def _unexpected(method):
        def _call(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        return _call

    for method in ("get", "post", "patch", "put", "delete"):
        monkeypatch.setattr(requests, method, _unexpected(method.upper()))


@pytest.fixture(autouse=True)
def _isolated_audit_log(monkeypatch, tmp_path):
    """Keep audit events out of the working tree."""
    audit_dir = tmp_path / "audit"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_dir / "app-registrations.jsonl")
    monkeypatch.setattr(audit, "_env_secret_path", None)
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-signing-key-for-audit-trail")
    return audit_dir


# ─────────────────────────────────────────────────────────────────────────────
# Domain Fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def credential():
    return Credential(access_token="test-token", username="operator@contoso.com", tenant_id="tenant-123")


@pytest.fixture
def acme_request():
    return ProvisioningRequest(
        name="Acme",
        redirect_uri="https://acme.example/#/auth/azuread/",
        secret_validity_days=365,
    )


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)


class FakeApplicationService:
    """Records every call; each operation can be made to fail."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on or {}
        self.calls = []

    def _maybe_fail(self, operation):
        if operation in self.fail_on:
            raise self.fail_on[operation]

    def create_application(self, display_name, redirect_uri=None):
        self.calls.append(("create_application", display_name, redirect_uri))
        self._maybe_fail("create_application")
        return ApplicationRecord(
            app_id="app-id-1",
            object_id="object-id-1",
            display_name=display_name,
            redirect_uris=(redirect_uri,) if redirect_uri else (),
        )

    def add_password(self, object_id, display_name, end_date_time):
        self.calls.append(("add_password", object_id, display_name, end_date_time))
        self._maybe_fail("add_password")
        return ClientSecret(
            secret_text="s3cr3t~value",
            expiry=end_date_time,
            display_name=display_name,
            key_id="key-1",
        )

    def set_required_resource_access(self, object_id, catalog):
        self.calls.append(("set_required_resource_access", object_id, tuple(catalog)))
        self._maybe_fail("set_required_resource_access")

    @property
    def operations(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def make_fake_applications():
    return FakeApplicationService


@pytest.fixture
def fake_applications():
    return FakeApplicationService()


@pytest.fixture
def scripted_input():
    """Build a read() callable that replays answers and records prompts."""

    def _make(*answers):
        state = SimpleNamespace(prompts=[], answers=list(answers))

        def read(prompt):
            state.prompts.append(prompt)
            if not state.answers:
                raise EOFError
            return state.answers.pop(0)

        state.read = read
        return state

    return _make
