"""Microsoft Graph client library.

Architecture:
- client.py: HTTP client with bearer authentication and error mapping
- applications.py: Application object, password credential and permission operations
- exceptions.py: Typed exceptions for error handling

Usage:
    from appreg.core.graph import GraphClient, ApplicationService

    client = GraphClient(credential.access_token)
    applications = ApplicationService(client)
    record = applications.create_application("demo", "https://demo.example/#/auth/azuread/")
"""
from .client import (
    GraphClient,
    GRAPH_BASE_URL,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    GraphError,
    GraphAPIError,
    GraphTransportError,
    UnexpectedResponseError,
)
from .applications import (
    ApplicationService,
    SIGN_IN_AUDIENCE,
    format_graph_datetime,
    parse_graph_datetime,
)

__all__ = [
    # Client
    "GraphClient",
    "GRAPH_BASE_URL",
    "REQUEST_TIMEOUT",

    # Exceptions
    "GraphError",
    "GraphAPIError",
    "GraphTransportError",
    "UnexpectedResponseError",

    # Services
    "ApplicationService",
    "SIGN_IN_AUDIENCE",
    "format_graph_datetime",
    "parse_graph_datetime",
]
