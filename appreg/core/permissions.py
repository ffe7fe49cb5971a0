"""Fixed API permission catalog attached to every provisioned application.

The catalog defines the product's access footprint. Editing it changes what
every newly registered application can request, so any change here must be a
reviewed edit.

Identifiers are the stable Microsoft-published GUIDs; ``name`` is only a
human-readable label and is not part of a grant's identity.
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class GrantKind(str, Enum):
    """Grant type, valued as the Graph ``resourceAccess.type`` wire string."""

    APPLICATION_ROLE = "Role"
    DELEGATED_SCOPE = "Scope"


@dataclass(frozen=True)
class PermissionGrant:
    """One permission on one resource application."""

    resource_app_id: str
    access_id: str
    kind: GrantKind
    name: str = field(default="", compare=False)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.resource_app_id, self.access_id, self.kind.value)

    def to_resource_access(self) -> dict[str, str]:
        return {"id": self.access_id, "type": self.kind.value}


@dataclass(frozen=True)
class ResourceGroup:
    """Grants requested on a single resource application."""

    resource_app_id: str
    display_name: str
    grants: tuple[PermissionGrant, ...]


MICROSOFT_GRAPH_APP_ID = "00000003-0000-0000-c000-000000000000"
WINDOWS_DEFENDER_ATP_APP_ID = "fc780465-2017-40d4-a0c5-307022471b92"

_ROLE = GrantKind.APPLICATION_ROLE
_SCOPE = GrantKind.DELEGATED_SCOPE


def _group(resource_app_id: str, display_name: str, entries: Iterable[tuple[str, GrantKind, str]]) -> ResourceGroup:
    return ResourceGroup(
        resource_app_id=resource_app_id,
        display_name=display_name,
        grants=tuple(
            PermissionGrant(resource_app_id, access_id, kind, name)
            for access_id, kind, name in entries
        ),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Shipped catalog
# ─────────────────────────────────────────────────────────────────────────────
MICROSOFT_GRAPH_GRANTS = _group(MICROSOFT_GRAPH_APP_ID, "Microsoft Graph", [
    # Applications
    ("9a5d68dd-52b0-4cc2-bd40-abcf44ac3a30", _ROLE, "Application.Read.All"),
    ("1bfefb4e-e0b5-418b-a88f-73c46d2cc8e9", _ROLE, "Application.ReadWrite.All"),
    # Devices
    ("7438b122-aefc-4978-80ed-43db9fcc7715", _ROLE, "Device.Read.All"),
    # Intune device management
    ("78145de6-330d-4800-a6ce-494ff2d33d07", _ROLE, "DeviceManagementApps.ReadWrite.All"),
    ("dc377aa6-52d8-4e23-b271-2a7ae04cedf3", _ROLE, "DeviceManagementConfiguration.Read.All"),
    ("2f51be20-0bb4-4fed-bf7b-db946066c75e", _ROLE, "DeviceManagementManagedDevices.Read.All"),
    ("58ca0d9a-1575-47e1-a3cb-007ef2e4583b", _ROLE, "DeviceManagementRBAC.Read.All"),
    ("06a5fe6d-c49d-46a7-b082-56b1b14103c7", _ROLE, "DeviceManagementServiceConfig.Read.All"),
    # Users and groups
    ("df021288-bdef-4463-88db-98f22de89214", _ROLE, "User.Read.All"),
    ("98830695-27a2-44f7-8c18-0c3ebc9698f6", _ROLE, "GroupMember.Read.All"),
    ("5b567255-7703-4780-807c-7be8301ae99b", _ROLE, "Group.Read.All"),
    # Delegated
    ("e1fe6dd8-ba31-4d61-89e7-88639da4683d", _SCOPE, "User.Read"),
    ("a154be20-db9c-4678-8ab7-66f6cc099a59", _SCOPE, "User.Read.All"),
    ("5f8c59db-677d-491f-a6b8-5f174b11ec1d", _SCOPE, "Group.Read.All"),
])

WINDOWS_DEFENDER_ATP_GRANTS = _group(WINDOWS_DEFENDER_ATP_APP_ID, "WindowsDefenderATP", [
    ("71fe6b80-7034-4028-9ed8-0f316df9c3ff", _ROLE, "Alert.Read.All"),
    ("47bf842d-354b-49ef-b741-3a6dd815bc13", _ROLE, "Ip.Read.All"),
    ("ea8291d3-4b9a-44b5-bc3a-6cea3026dc79", _ROLE, "Machine.Read.All"),
    ("aa027352-232b-4ed4-b963-a705fc4d6d2c", _ROLE, "Machine.ReadWrite.All"),
    ("a86d9824-b2b6-45f8-b042-16bc4922ed4e", _ROLE, "Machine.Scan"),
    ("6a33eedf-ba73-4e5a-821b-f057ef63853a", _ROLE, "RemediationTasks.Read.All"),
    ("02b005dd-f804-43b4-8fc7-078460413f74", _ROLE, "Score.Read.All"),
    ("e870c0c1-c1a2-41ca-948e-a33912d2d3f0", _ROLE, "SecurityBaselinesAssessment.Read.All"),
    ("227f2ea0-c2c2-4428-b7af-9ff40f1a720e", _ROLE, "SecurityConfiguration.Read.All"),
    ("6443965c-7dd2-4cfd-b38f-bb7772bee163", _ROLE, "SecurityRecommendation.Read.All"),
    ("37f71c98-d198-41ae-964d-2c49aab74926", _ROLE, "Software.Read.All"),
    ("a833834a-4cf1-4732-8acf-bbcfa13fb610", _ROLE, "User.Read.All"),
    ("41269fc5-d04d-4bfd-bce7-43a51cea049a", _ROLE, "Vulnerability.Read.All"),
])

PERMISSION_CATALOG: tuple[ResourceGroup, ...] = (
    MICROSOFT_GRAPH_GRANTS,
    WINDOWS_DEFENDER_ATP_GRANTS,
)


def flatten_grants(catalog: Iterable[ResourceGroup] = PERMISSION_CATALOG) -> tuple[PermissionGrant, ...]:
    """Return every grant of the catalog in catalog order."""
    return tuple(grant for group in catalog for grant in group.grants)


def required_resource_access(catalog: Iterable[ResourceGroup] = PERMISSION_CATALOG) -> list[dict[str, Any]]:
    """Build the Graph ``requiredResourceAccess`` payload for the catalog."""
    return [
        {
            "resourceAppId": group.resource_app_id,
            "resourceAccess": [grant.to_resource_access() for grant in group.grants],
        }
        for group in catalog
    ]


def validate_catalog(catalog: Iterable[ResourceGroup]) -> None:
    """Check identifier format and grant uniqueness.

    Raises:
        ValueError: If an identifier is not a UUID, a grant is filed under the
            wrong resource group, or a (resource, access id, kind) triple repeats
    """
    seen: set[tuple[str, str, str]] = set()
    for group in catalog:
        uuid.UUID(group.resource_app_id)
        for grant in group.grants:
            uuid.UUID(grant.access_id)
            if grant.resource_app_id != group.resource_app_id:
                raise ValueError(
                    f"Grant {grant.name or grant.access_id} filed under {group.display_name} "
                    f"but targets resource {grant.resource_app_id}"
                )
            if grant.key in seen:
                raise ValueError(f"Duplicate grant {grant.key}")
            seen.add(grant.key)


validate_catalog(PERMISSION_CATALOG)
