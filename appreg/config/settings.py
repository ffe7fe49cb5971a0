"""Settings loader driven by environment variables."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Well-known public client ID of the Azure CLI (allows public client sign-in
# without registering a bootstrap application in the tenant).
DEFAULT_CLIENT_ID = "04b07795-8ddb-461a-bbee-02f9e1bf7b46"
DEFAULT_LOGIN_BASE_URL = "https://login.microsoftonline.com"
DEFAULT_AUTHORITY = f"{DEFAULT_LOGIN_BASE_URL}/common"
DEFAULT_SCOPES = ["https://graph.microsoft.com/.default"]
DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_HTTP_TIMEOUT = 30

DEFAULT_APP_NAME = "Easy2PatchProd"
DEFAULT_REDIRECT_URI_MARKER = "/#/auth/azuread/"
DEFAULT_SECRET_VALIDITY_DAYS = 730


@dataclass
class AppConfig:
    """Application configuration container."""
    # MSAL public client
    client_id: str = DEFAULT_CLIENT_ID
    authority: str = DEFAULT_AUTHORITY
    login_base_url: str = DEFAULT_LOGIN_BASE_URL
    scopes: list[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))

    # Microsoft Graph
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    http_timeout: int = DEFAULT_HTTP_TIMEOUT

    # Operator input defaults
    default_app_name: str = DEFAULT_APP_NAME
    redirect_uri_marker: str = DEFAULT_REDIRECT_URI_MARKER
    default_secret_validity_days: int = DEFAULT_SECRET_VALIDITY_DAYS

    # Summary file location
    output_dir: str = "."

    @property
    def redirect_uri_example(self) -> str:
        """Example redirect URI shown to the operator in prompts and errors."""
        return redirect_uri_example(self.redirect_uri_marker)


def redirect_uri_example(marker: str = DEFAULT_REDIRECT_URI_MARKER) -> str:
    return f"https://e2p.domain.com{marker}"


def _get_str(var_name: str, default: str) -> str:
    """Get a non-blank environment variable or the default."""
    value = os.environ.get(var_name, "").strip()
    return value or default


def _get_int(var_name: str, default: int) -> int:
    """Get a positive integer environment variable; invalid values fall back to default."""
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", var_name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %s", var_name, raw, default)
        return default
    return value


def _get_list(var_name: str, default: list[str]) -> list[str]:
    """Get a comma-separated environment variable as a list."""
    items = [
        item.strip()
        for item in os.environ.get(var_name, "").split(",")
        if item.strip()
    ]
    return items or list(default)


def load_settings() -> AppConfig:
    """Load application settings from environment variables."""
    login_base_url = _get_str("APPREG_LOGIN_BASE_URL", DEFAULT_LOGIN_BASE_URL).rstrip("/")

    config = AppConfig(
        client_id=_get_str("APPREG_CLIENT_ID", DEFAULT_CLIENT_ID),
        authority=_get_str("APPREG_AUTHORITY", f"{login_base_url}/common"),
        login_base_url=login_base_url,
        scopes=_get_list("APPREG_SCOPES", DEFAULT_SCOPES),
        graph_base_url=_get_str("GRAPH_BASE_URL", DEFAULT_GRAPH_BASE_URL).rstrip("/"),
        http_timeout=_get_int("APPREG_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        default_app_name=_get_str("APPREG_DEFAULT_NAME", DEFAULT_APP_NAME),
        redirect_uri_marker=_get_str("APPREG_REDIRECT_MARKER", DEFAULT_REDIRECT_URI_MARKER),
        default_secret_validity_days=_get_int("APPREG_DEFAULT_SECRET_DAYS", DEFAULT_SECRET_VALIDITY_DAYS),
        output_dir=_get_str("APPREG_OUTPUT_DIR", "."),
    )

    logger.debug(
        "Settings loaded: client_id=%s authority=%s graph=%s",
        config.client_id,
        config.authority,
        config.graph_base_url,
    )
    return config


# Global settings instance (loaded on first import)
settings: AppConfig = load_settings()
