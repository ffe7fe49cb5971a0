"""Core Provisioning Logic Module

This module holds the provisioning workflow, independent of the console
front-end in scripts/register_app.py.

Module Structure:
    - graph/                  : Low-level Microsoft Graph client and application operations
    - auth.py                 : Operator authentication (silent, then interactive)
    - permissions.py          : Fixed API permission catalog
    - models.py               : Immutable value objects passed between steps
    - validators.py           : Operator input validation
    - input_collector.py      : Prompt loop producing a ProvisioningRequest
    - provisioning_service.py : Create application -> secret -> permissions
    - consent.py              : Admin consent URL
    - reporting.py            : Summary rendering and best-effort side actions

Usage Pattern:
    Import explicitly when needed:
        from appreg.core.permissions import PERMISSION_CATALOG, flatten_grants
        from appreg.core.provisioning_service import ProvisioningService, ProvisioningError
        from appreg.core.consent import build_consent_url
"""
