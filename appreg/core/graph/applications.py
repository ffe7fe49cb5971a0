"""Application registration operations on Microsoft Graph."""
from __future__ import annotations
import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from appreg.core.models import ApplicationRecord, ClientSecret
from appreg.core.permissions import ResourceGroup, required_resource_access

from .client import GraphClient
from .exceptions import UnexpectedResponseError

logger = logging.getLogger(__name__)

SIGN_IN_AUDIENCE = "AzureADMyOrg"

_FRACTION = re.compile(r"\.(\d{6})\d+")


def format_graph_datetime(value: datetime) -> str:
    """Render an aware datetime as the UTC ISO-8601 string Graph expects."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_graph_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a Graph timestamp (trailing Z, up to 7 fractional digits)."""
    if not value:
        return None
    text = _FRACTION.sub(r".\1", value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _json_body(resp, operation: str) -> dict[str, Any]:
    try:
        body = resp.json()
    except ValueError as exc:
        raise UnexpectedResponseError(f"{operation} response is not JSON") from exc
    if not isinstance(body, dict):
        raise UnexpectedResponseError(f"{operation} response is not a JSON object")
    return body


def _require(body: dict[str, Any], key: str, operation: str) -> Any:
    value = body.get(key)
    if not value:
        raise UnexpectedResponseError(f"{operation} response is missing '{key}'")
    return value


class ApplicationService:
    """Service for managing application objects in Entra ID."""

    def __init__(self, client: GraphClient):
        """Initialize application service.

        Args:
            client: Graph client carrying the operator's token
        """
        self.client = client

    def create_application(self, display_name: str, redirect_uri: Optional[str] = None) -> ApplicationRecord:
        """Create a single-tenant application object.

        Args:
            display_name: Application display name
            redirect_uri: Web redirect URI; omitted from the payload when empty

        Returns:
            ApplicationRecord with the directory-assigned identifiers
        """
        payload: dict[str, Any] = {
            "displayName": display_name,
            "signInAudience": SIGN_IN_AUDIENCE,
            "requiredResourceAccess": [],
        }
        if redirect_uri and redirect_uri.strip():
            payload["web"] = {"redirectUris": [redirect_uri]}

        body = _json_body(self.client.post("/applications", json=payload), "create application")
        record = ApplicationRecord(
            app_id=_require(body, "appId", "create application"),
            object_id=_require(body, "id", "create application"),
            display_name=body.get("displayName") or display_name,
            redirect_uris=tuple((body.get("web") or {}).get("redirectUris") or ()),
        )
        logger.info("Created application %s (object %s)", record.app_id, record.object_id)
        return record

    def add_password(self, object_id: str, display_name: str, end_date_time: datetime) -> ClientSecret:
        """Add a client secret to the application.

        The response is the only time the directory discloses the secret text.

        Args:
            object_id: Application object ID
            display_name: Label shown for the credential in the portal
            end_date_time: Requested expiry (aware datetime)

        Returns:
            ClientSecret holding the one-time secret text
        """
        payload = {
            "passwordCredential": {
                "displayName": display_name,
                "endDateTime": format_graph_datetime(end_date_time),
            }
        }
        body = _json_body(
            self.client.post(f"/applications/{object_id}/addPassword", json=payload),
            "add password",
        )
        secret = ClientSecret(
            secret_text=_require(body, "secretText", "add password"),
            expiry=parse_graph_datetime(body.get("endDateTime")) or end_date_time,
            display_name=body.get("displayName") or display_name,
            key_id=body.get("keyId"),
        )
        logger.info("Added client secret %s to application object %s", secret.key_id, object_id)
        return secret

    def set_required_resource_access(self, object_id: str, catalog: Iterable[ResourceGroup]) -> None:
        """Replace the application's requiredResourceAccess with the catalog.

        Grants present on the application but absent from the catalog are
        dropped; the last writer wins.

        Args:
            object_id: Application object ID
            catalog: Resource groups to request
        """
        payload = {"requiredResourceAccess": required_resource_access(catalog)}
        self.client.patch(f"/applications/{object_id}", json=payload)
        logger.info("Updated requiredResourceAccess on application object %s", object_id)
