"""Microsoft Graph exceptions for error handling."""


class GraphError(Exception):
    """Base exception for all Microsoft Graph operations."""
    pass


class GraphAPIError(GraphError):
    """HTTP error from the Microsoft Graph API.
    
    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class GraphTransportError(GraphError):
    """Request never produced an HTTP response (DNS, TLS, timeout...)."""
    pass


class UnexpectedResponseError(GraphError):
    """Response is missing a field the workflow depends on."""
    pass
