"""Unit tests for application registration operations on Graph."""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from appreg.core.graph import (
    ApplicationService,
    UnexpectedResponseError,
    format_graph_datetime,
    parse_graph_datetime,
)
from appreg.core.permissions import PERMISSION_CATALOG, flatten_grants


@pytest.fixture
def graph(stub_response):
    client = MagicMock()
    client.stub_response = stub_response
    return client


def test_create_application_payload_with_redirect(graph):
    graph.post.return_value = graph.stub_response({
        "appId": "11111111-1111-1111-1111-111111111111",
        "id": "22222222-2222-2222-2222-222222222222",
        "displayName": "Acme",
        "web": {"redirectUris": ["https://acme.example/#/auth/azuread/"]},
    }, 201)

    record = ApplicationService(graph).create_application("Acme", "https://acme.example/#/auth/azuread/")

    graph.post.assert_called_once_with("/applications", json={
        "displayName": "Acme",
        "signInAudience": "AzureADMyOrg",
        "requiredResourceAccess": [],
        "web": {"redirectUris": ["https://acme.example/#/auth/azuread/"]},
    })
    assert record.app_id == "11111111-1111-1111-1111-111111111111"
    assert record.object_id == "22222222-2222-2222-2222-222222222222"
    assert record.display_name == "Acme"
    assert record.redirect_uris == ("https://acme.example/#/auth/azuread/",)


def test_create_application_without_redirect_omits_web(graph):
    graph.post.return_value = graph.stub_response({"appId": "a", "id": "o", "displayName": "Acme"}, 201)

    record = ApplicationService(graph).create_application("Acme", "")

    payload = graph.post.call_args.kwargs["json"]
    assert "web" not in payload
    assert record.redirect_uris == ()


def test_create_application_requires_identifiers(graph):
    graph.post.return_value = graph.stub_response({"displayName": "Acme"}, 201)

    with pytest.raises(UnexpectedResponseError, match="appId"):
        ApplicationService(graph).create_application("Acme")


def test_add_password_payload_and_secret(graph):
    expiry = datetime(2027, 10, 17, 9, 30, tzinfo=timezone.utc)
    graph.post.return_value = graph.stub_response({
        "secretText": "s3cr3t~value",
        "endDateTime": "2027-10-17T09:30:00.1234567Z",
        "displayName": "Auto-generated secret - 2026-10-17",
        "keyId": "key-1",
    })

    secret = ApplicationService(graph).add_password("object-1", "Auto-generated secret - 2026-10-17", expiry)

    graph.post.assert_called_once_with("/applications/object-1/addPassword", json={
        "passwordCredential": {
            "displayName": "Auto-generated secret - 2026-10-17",
            "endDateTime": "2027-10-17T09:30:00Z",
        }
    })
    assert secret.secret_text == "s3cr3t~value"
    assert secret.key_id == "key-1"
    assert abs(secret.expiry - expiry) < timedelta(seconds=1)
    assert "s3cr3t~value" not in repr(secret)


def test_add_password_without_end_date_keeps_requested_expiry(graph):
    expiry = datetime(2027, 1, 1, tzinfo=timezone.utc)
    graph.post.return_value = graph.stub_response({"secretText": "value"})

    secret = ApplicationService(graph).add_password("object-1", "label", expiry)

    assert secret.expiry == expiry
    assert secret.display_name == "label"


def test_add_password_requires_secret_text(graph):
    graph.post.return_value = graph.stub_response({"keyId": "key-1"})

    with pytest.raises(UnexpectedResponseError, match="secretText"):
        ApplicationService(graph).add_password("object-1", "label", datetime.now(timezone.utc))


def test_set_required_resource_access_replaces_with_full_catalog(graph):
    graph.patch.return_value = graph.stub_response(None, 204)

    ApplicationService(graph).set_required_resource_access("object-1", PERMISSION_CATALOG)

    path = graph.patch.call_args.args[0]
    payload = graph.patch.call_args.kwargs["json"]
    assert path == "/applications/object-1"
    assert list(payload) == ["requiredResourceAccess"]
    sent = {
        (entry["resourceAppId"], access["id"], access["type"])
        for entry in payload["requiredResourceAccess"]
        for access in entry["resourceAccess"]
    }
    assert sent == {grant.key for grant in flatten_grants(PERMISSION_CATALOG)}
    assert sum(len(entry["resourceAccess"]) for entry in payload["requiredResourceAccess"]) == 27


def test_format_graph_datetime_converts_to_utc():
    local = datetime(2026, 10, 17, 11, 30, tzinfo=timezone(timedelta(hours=2)))
    assert format_graph_datetime(local) == "2026-10-17T09:30:00Z"


@pytest.mark.parametrize("raw,expected", [
    ("2027-10-17T09:30:00Z", datetime(2027, 10, 17, 9, 30, tzinfo=timezone.utc)),
    ("2027-10-17T09:30:00.1234567Z", datetime(2027, 10, 17, 9, 30, 0, 123456, tzinfo=timezone.utc)),
    ("2027-10-17T09:30:00", datetime(2027, 10, 17, 9, 30, tzinfo=timezone.utc)),
    ("2027-10-17T11:30:00+02:00", datetime(2027, 10, 17, 9, 30, tzinfo=timezone.utc)),
])
def test_parse_graph_datetime(raw, expected):
    assert parse_graph_datetime(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "not a date"])
def test_parse_graph_datetime_invalid(raw):
    assert parse_graph_datetime(raw) is None


def test_add_password_non_json_body_is_unexpected(graph):
    graph.post.return_value = graph.stub_response(None, 200)

    with pytest.raises(UnexpectedResponseError, match="add password response is not JSON"):
        ApplicationService(graph).add_password("object-1", "label", datetime.now(timezone.utc))


def test_create_application_rejects_non_object_body(graph):
    graph.post.return_value = graph.stub_response(["unexpected"], 201)

    with pytest.raises(UnexpectedResponseError, match="not a JSON object"):
        ApplicationService(graph).create_application("Acme")
