"""Operator authentication against Entra ID.

A credential is acquired silently from an account already in the MSAL token
cache when possible, and through an interactive browser sign-in otherwise.
Only the "interaction required" outcome of the silent attempt selects the
interactive path; every other failure ends the session.
"""
from __future__ import annotations
import logging
import sys
from typing import Any, Optional

import msal

from appreg.config.settings import AppConfig, settings
from appreg.core.models import Credential

logger = logging.getLogger(__name__)

# Error codes of a silent attempt that can be resolved by signing in again.
INTERACTION_REQUIRED_ERRORS = frozenset({
    "interaction_required",
    "login_required",
    "consent_required",
    "invalid_grant",
})


class AuthenticationError(Exception):
    """Neither the silent nor the interactive flow produced a credential."""
    pass


class InteractionRequired(Exception):
    """Silent acquisition is unavailable; the operator must sign in."""
    pass


def _describe(result: dict[str, Any]) -> str:
    error = result.get("error", "unknown_error")
    description = result.get("error_description")
    return f"{error}: {description}" if description else error


class Authenticator:
    """Acquire the operator's Graph credential.

    Usage:
        authenticator = Authenticator()
        credential = authenticator.acquire_credential()
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        app: Optional[msal.PublicClientApplication] = None,
    ):
        """Initialize authenticator.

        Args:
            config: Settings (client id, authority, scopes)
            app: Pre-built MSAL application, mainly for tests
        """
        self.config = config or settings
        self.scopes = list(self.config.scopes)
        self.app = app or msal.PublicClientApplication(
            self.config.client_id,
            authority=self.config.authority,
        )

    def acquire_silent(self) -> tuple[dict[str, Any], Optional[dict[str, Any]]]:
        """Acquire a token for the first cached account.

        Returns:
            (token result, cached account)

        Raises:
            InteractionRequired: No cached account, or the cache cannot
                satisfy the request without the operator
            AuthenticationError: Any other error reported by the token endpoint
        """
        accounts = self.app.get_accounts()
        if not accounts:
            raise InteractionRequired("No cached account")

        account = accounts[0]
        result = self.app.acquire_token_silent_with_error(self.scopes, account=account)
        if not result:
            raise InteractionRequired(f"No cached token for {account.get('username')}")
        if "access_token" not in result:
            if result.get("error") in INTERACTION_REQUIRED_ERRORS:
                raise InteractionRequired(_describe(result))
            raise AuthenticationError(_describe(result))
        return result, account

    def acquire_interactive(self) -> dict[str, Any]:
        """Run the browser sign-in with an account picker.

        Raises:
            AuthenticationError: If the sign-in returns an error
        """
        result = self.app.acquire_token_interactive(self.scopes, prompt=msal.Prompt.SELECT_ACCOUNT)
        if not result or "access_token" not in result:
            raise AuthenticationError(_describe(result or {}))
        return result

    def acquire_credential(self) -> Credential:
        """Acquire one credential for the session.

        Raises:
            AuthenticationError: Wrapping whatever made both paths fail
        """
        try:
            try:
                result, account = self.acquire_silent()
                logger.info("Token acquired silently for %s", account.get("username") if account else None)
            except InteractionRequired as exc:
                print(f"[auth] Interactive sign-in required ({exc})", file=sys.stderr)
                result, account = self.acquire_interactive(), None
            return self._to_credential(result, account)
        except Exception as exc:
            raise AuthenticationError(f"Authentication failed: {exc}") from exc

    @staticmethod
    def _to_credential(result: dict[str, Any], account: Optional[dict[str, Any]]) -> Credential:
        claims = result.get("id_token_claims") or {}
        account = account or {}

        username = claims.get("preferred_username") or account.get("username") or ""
        tenant_id = claims.get("tid")
        if not tenant_id and "." in account.get("home_account_id", ""):
            tenant_id = account["home_account_id"].split(".", 1)[1]
        if not tenant_id:
            raise AuthenticationError("Token response does not identify the tenant")

        return Credential(
            access_token=result["access_token"],
            username=username,
            tenant_id=tenant_id,
        )
