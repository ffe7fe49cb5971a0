"""Immutable values passed between the provisioning steps."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from appreg.core.permissions import PermissionGrant


@dataclass(frozen=True)
class Credential:
    """Bearer credential for one session."""

    access_token: str = field(repr=False)
    username: str
    tenant_id: str


@dataclass(frozen=True)
class ProvisioningRequest:
    """Operator-supplied registration parameters.

    Built by the input collector once every field has been validated; the
    constructor re-checks the invariants so an invalid request cannot exist.
    """

    name: str
    redirect_uri: str
    secret_validity_days: int

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Application name is required")
        if not self.redirect_uri:
            raise ValueError("Redirect URI is required")
        if isinstance(self.secret_validity_days, bool) or self.secret_validity_days <= 0:
            raise ValueError("Secret validity must be a positive number of days")


@dataclass(frozen=True)
class ApplicationRecord:
    """Application object as created in the directory."""

    app_id: str
    object_id: str
    display_name: str
    redirect_uris: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClientSecret:
    """Password credential returned by addPassword.

    The directory returns ``secret_text`` exactly once; nothing can fetch it
    again, so this value is the only copy.
    """

    secret_text: str = field(repr=False)
    expiry: datetime
    display_name: str = ""
    key_id: Optional[str] = None


@dataclass(frozen=True)
class ProvisioningResult:
    application: ApplicationRecord
    secret: ClientSecret
    grants: tuple[PermissionGrant, ...]
