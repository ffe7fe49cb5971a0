"""Admin consent URL for a provisioned application."""
from __future__ import annotations

from appreg.config.settings import DEFAULT_LOGIN_BASE_URL


def build_consent_url(app_id: str, tenant_id: str, issuer_base: str = DEFAULT_LOGIN_BASE_URL) -> str:
    """Build the tenant-wide admin consent URL.

    Both identifiers come from earlier steps and are used as-is.

    Args:
        app_id: Application (client) ID
        tenant_id: Tenant the application was registered in
        issuer_base: Login endpoint base URL

    Returns:
        The admin consent URL
    """
    return f"{issuer_base}/{tenant_id}/adminconsent?client_id={app_id}"
