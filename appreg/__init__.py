"""Entra ID application registration provisioner.

To run an interactive provisioning session:
    python scripts/register_app.py

To use the provisioning workflow programmatically:
    from appreg.core.auth import Authenticator
    from appreg.core.graph import GraphClient, ApplicationService
    from appreg.core.provisioning_service import ProvisioningService
"""
