"""
Provisioning Service Layer — Application Registration Workflow

Runs the dependent directory operations for one registration:

    create application ──> add client secret ──> attach permission catalog

Every step needs the application's object ID, so creation always comes first
and runs exactly once. The secret is issued before permissions are attached;
if it fails, nothing else is sent. No step is retried and nothing is rolled
back: an application left without a secret or permissions is reported to the
operator through ProvisioningError.
"""

from __future__ import annotations
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from appreg.core.graph import ApplicationService, GraphError
from appreg.core.models import (
    ApplicationRecord,
    ClientSecret,
    Credential,
    ProvisioningRequest,
    ProvisioningResult,
)
from appreg.core.permissions import PERMISSION_CATALOG, ResourceGroup, flatten_grants
from scripts import audit

logger = logging.getLogger(__name__)

STEP_CREATE_APPLICATION = "create application"
STEP_CREATE_SECRET = "create client secret"
STEP_ATTACH_PERMISSIONS = "attach API permissions"


# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions
# ─────────────────────────────────────────────────────────────────────────────

class ProvisioningError(Exception):
    """A provisioning step failed; later steps were not attempted.

    Attributes:
        step: Name of the failed step
        application: Application created before the failure, if any
        secret: Secret issued before the failure, if any (its only copy)
    """

    def __init__(
        self,
        step: str,
        detail: str,
        application: Optional[ApplicationRecord] = None,
        secret: Optional[ClientSecret] = None,
    ):
        self.step = step
        self.detail = detail
        self.application = application
        self.secret = secret
        message = f"Failed to {step}: {detail}"
        if application is not None:
            message += f" (application {application.app_id} was created and left in place)"
        super().__init__(message)


# ─────────────────────────────────────────────────────────────────────────────
# Utility Functions
# ─────────────────────────────────────────────────────────────────────────────

def secret_display_name(now: datetime) -> str:
    """Portal label for a generated secret, dated for traceability."""
    return f"Auto-generated secret - {now:%Y-%m-%d}"


def _local_now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


# ─────────────────────────────────────────────────────────────────────────────
# Service
# ─────────────────────────────────────────────────────────────────────────────

class ProvisioningService:
    """Create a fully configured application registration.

    Usage:
        service = ProvisioningService(ApplicationService(GraphClient(token)), credential)
        result = service.provision(request)
    """

    def __init__(
        self,
        applications: ApplicationService,
        credential: Optional[Credential] = None,
        catalog: Iterable[ResourceGroup] = PERMISSION_CATALOG,
        clock: Callable[[], datetime] = _local_now,
    ):
        """Initialize provisioning service.

        Args:
            applications: Graph application operations
            credential: Signed-in operator, recorded in the audit trail
            catalog: Permission catalog attached to the application
            clock: Returns the current aware datetime
        """
        self.applications = applications
        self.credential = credential
        self.catalog = tuple(catalog)
        self.clock = clock

    def _audit(self, event_type: audit.EventType, request: ProvisioningRequest, details: dict) -> None:
        audit.safe_log_event(
            event_type,
            request.name,
            operator=self.credential.username if self.credential else "unknown",
            tenant_id=self.credential.tenant_id if self.credential else "",
            details=details,
        )

    def create_application(self, request: ProvisioningRequest) -> ApplicationRecord:
        try:
            application = self.applications.create_application(request.name, request.redirect_uri)
        except GraphError as exc:
            raise ProvisioningError(STEP_CREATE_APPLICATION, str(exc)) from exc
        self._audit("app_created", request, {"app_id": application.app_id, "object_id": application.object_id})
        return application

    def create_secret(self, request: ProvisioningRequest, application: ApplicationRecord) -> ClientSecret:
        now = self.clock()
        try:
            expiry = now + timedelta(days=request.secret_validity_days)
        except OverflowError as exc:
            raise ProvisioningError(
                STEP_CREATE_SECRET,
                f"validity of {request.secret_validity_days} days is out of range",
                application,
            ) from exc
        try:
            secret = self.applications.add_password(application.object_id, secret_display_name(now), expiry)
        except GraphError as exc:
            raise ProvisioningError(STEP_CREATE_SECRET, str(exc), application) from exc
        self._audit("secret_created", request, {
            "app_id": application.app_id,
            "key_id": secret.key_id,
            "expiry": secret.expiry.isoformat(),
        })
        return secret

    def attach_permissions(
        self,
        request: ProvisioningRequest,
        application: ApplicationRecord,
        secret: Optional[ClientSecret] = None,
    ) -> None:
        try:
            self.applications.set_required_resource_access(application.object_id, self.catalog)
        except GraphError as exc:
            raise ProvisioningError(STEP_ATTACH_PERMISSIONS, str(exc), application, secret) from exc
        self._audit("permissions_granted", request, {
            "app_id": application.app_id,
            "resources": [group.resource_app_id for group in self.catalog],
            "grant_count": len(flatten_grants(self.catalog)),
        })

    def provision(self, request: ProvisioningRequest) -> ProvisioningResult:
        """Run create application, create secret and attach permissions in order.

        Args:
            request: Validated operator request

        Returns:
            ProvisioningResult holding the application and its one-time secret

        Raises:
            ProvisioningError: On the first failed step
        """
        print(f"[provision] Creating application '{request.name}'", file=sys.stderr)
        application = self.create_application(request)

        print(f"[provision] Adding client secret ({request.secret_validity_days} days)", file=sys.stderr)
        secret = self.create_secret(request, application)

        print(f"[provision] Attaching {len(flatten_grants(self.catalog))} API permissions", file=sys.stderr)
        self.attach_permissions(request, application, secret)

        logger.info("Provisioned application %s", application.app_id)
        return ProvisioningResult(
            application=application,
            secret=secret,
            grants=flatten_grants(self.catalog),
        )
