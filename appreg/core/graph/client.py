"""Low-level HTTP client for the Microsoft Graph API.

Attaches the operator's bearer token and turns HTTP failures into typed errors.
"""
from __future__ import annotations
import logging
import os
from typing import Optional, Dict, Any

import requests

from .exceptions import GraphAPIError, GraphTransportError

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
REQUEST_TIMEOUT = 30


class GraphClient:
    """HTTP client for the Microsoft Graph API.

    Features:
    - Bearer token attached to every request
    - Centralized error handling
    - JSON payloads in and out

    Usage:
        client = GraphClient(credential.access_token)
        response = client.post("/applications", json={"displayName": "demo"})
    """

    def __init__(self, access_token: str, base_url: Optional[str] = None, timeout: int = REQUEST_TIMEOUT):
        """Initialize Graph client.

        Args:
            access_token: Bearer token for graph.microsoft.com
            base_url: Graph base URL (defaults to GRAPH_BASE_URL env var, then v1.0 endpoint)
            timeout: Per-request timeout in seconds
        """
        if not access_token:
            raise ValueError("GraphClient requires an access token")
        self.base_url = (base_url or os.environ.get("GRAPH_BASE_URL", GRAPH_BASE_URL)).rstrip("/")
        self.timeout = timeout
        self._token = access_token

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = dict(extra or {})
        headers["Authorization"] = f"Bearer {self._token}"
        headers.setdefault("Content-Type", "application/json")
        return headers

    def post(self, path: str, json: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute POST request.

        Args:
            path: API endpoint path
            json: JSON payload
            **kwargs: Additional arguments for requests.post

        Returns:
            Response object

        Raises:
            GraphAPIError: On HTTP error
            GraphTransportError: When no response was received
        """
        url = f"{self.base_url}{path}"
        headers = self._headers(kwargs.pop("headers", None))
        try:
            resp = requests.post(url, json=json, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise GraphTransportError(f"POST {url} failed: {exc}") from exc
        self._handle_error(resp)
        return resp

    def patch(self, path: str, json: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute PATCH request.

        Graph answers a successful PATCH with 204 and no body.

        Raises:
            GraphAPIError: On HTTP error
            GraphTransportError: When no response was received
        """
        url = f"{self.base_url}{path}"
        headers = self._headers(kwargs.pop("headers", None))
        try:
            resp = requests.patch(url, json=json, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise GraphTransportError(f"PATCH {url} failed: {exc}") from exc
        self._handle_error(resp)
        return resp

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Args:
            resp: Response object to check

        Raises:
            GraphAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.debug("Graph call failed: %s %s", resp.status_code, message)
            raise GraphAPIError(resp.status_code, message, resp.url)


def _error_message(resp: requests.Response) -> str:
    """Extract ``error.code: error.message`` from a Graph error body, else the raw text."""
    try:
        body: Any = resp.json()
    except ValueError:
        return resp.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        code = error.get("code")
        return f"{code}: {error['message']}" if code else error["message"]
    return resp.text
