"""Interactive Entra ID application registration.

Signs the operator in, creates an application with a client secret and the
fixed API permission catalog, then prints the admin consent URL and a summary.

This module serves as a CLI wrapper around appreg.core services.
"""
from __future__ import annotations
import argparse
import logging
import sys
import webbrowser
from pathlib import Path
from typing import Callable, Optional

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from appreg.config.settings import AppConfig, load_settings
from appreg.core.auth import Authenticator
from appreg.core.consent import build_consent_url
from appreg.core.graph import ApplicationService, GraphClient
from appreg.core.input_collector import InputCollector
from appreg.core.models import Credential
from appreg.core.provisioning_service import ProvisioningError, ProvisioningService
from appreg.core.reporting import (
    CONSENT_REMINDER,
    Diagnostics,
    open_consent_url,
    render_summary,
    write_summary_file,
)
from scripts import audit

ServiceFactory = Callable[[Credential, AppConfig], ProvisioningService]


def default_service_factory(credential: Credential, config: AppConfig) -> ProvisioningService:
    client = GraphClient(credential.access_token, base_url=config.graph_base_url, timeout=config.http_timeout)
    return ProvisioningService(ApplicationService(client), credential)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create an Entra ID app registration with the required API permissions")
    parser.add_argument("--client-id", help="Public client used for sign-in (default: Azure CLI)")
    parser.add_argument("--authority", help="Sign-in authority (default: https://login.microsoftonline.com/common)")
    parser.add_argument("--graph-url", help="Microsoft Graph base URL")
    parser.add_argument("--name", help="Application name (skips the prompt)")
    parser.add_argument("--redirect-uri", help="Web redirect URI (skips the prompt when valid)")
    parser.add_argument("--secret-days", help="Client secret validity in days (skips the prompt)")
    parser.add_argument("--output-dir", help="Directory for the summary file (default: current directory)")

    browser = parser.add_mutually_exclusive_group()
    browser.add_argument("--open-browser", dest="open_browser", action="store_true", default=None,
                         help="Open the admin consent URL without asking")
    browser.add_argument("--no-browser", dest="open_browser", action="store_false",
                         help="Never open the admin consent URL")

    parser.add_argument("--no-pause", action="store_true", help="Exit without waiting for Enter")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> AppConfig:
    """Load settings from the environment and apply command-line overrides."""
    config = load_settings()
    if args.client_id:
        config.client_id = args.client_id
    if args.authority:
        config.authority = args.authority
    if args.graph_url:
        config.graph_base_url = args.graph_url.rstrip("/")
    if args.output_dir:
        config.output_dir = args.output_dir
    return config


def _wants_browser(args: argparse.Namespace, read: Callable[[str], str]) -> bool:
    if args.open_browser is not None:
        return args.open_browser
    answer = read("Would you like to open the admin consent URL in your browser? (y/n): ")
    return (answer or "").strip().lower().startswith("y")


def _audit_failure(app_name: str, credential: Optional[Credential], error: str, step: Optional[str] = None) -> None:
    audit.safe_log_event(
        "registration_failed",
        app_name,
        operator=credential.username if credential else "unknown",
        tenant_id=credential.tenant_id if credential else "",
        details={"error": error, "step": step},
        success=False,
    )


def run_session(
    args: argparse.Namespace,
    *,
    config: Optional[AppConfig] = None,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    authenticator: Optional[Authenticator] = None,
    service_factory: ServiceFactory = default_service_factory,
    opener: Callable[[str], bool] = webbrowser.open,
) -> int:
    """Run one provisioning session.

    This is the only place workflow errors are caught: they are reported with
    their underlying cause and the session still waits for the operator.

    Returns:
        Process exit code (0 on success, 1 when the workflow aborted)
    """
    config = config or config_from_args(args)
    diagnostics = Diagnostics()
    credential: Optional[Credential] = None
    app_name = args.name or config.default_app_name
    exit_code = 0

    write("=== Azure AD Application Registration Tool ===")
    write("This tool will help you create Azure AD app registrations with required permissions.")
    write("")

    try:
        write("Step 1: Authenticating with Azure AD...")
        credential = (authenticator or Authenticator(config)).acquire_credential()
        write(f"Successfully authenticated as: {credential.username}")
        write("")

        write("Step 2: Application details")
        request = InputCollector(read=read, write=write, config=config).collect(
            name=args.name,
            redirect_uri=args.redirect_uri,
            secret_days=args.secret_days,
        )
        app_name = request.name
        write("")

        write("Step 3: Creating Azure AD application, client secret and API permissions...")
        result = service_factory(credential, config).provision(request)
        application, secret = result.application, result.secret
        write("Application created successfully!")
        write(f"Application ID: {application.app_id}")
        write(f"Object ID: {application.object_id}")
        write(f"Client Secret created (expires: {secret.expiry.isoformat(sep=' ', timespec='seconds')})")
        write(f"Secret Value: {secret.secret_text}")
        write("⚠️  IMPORTANT: Save this secret value now - it won't be shown again!")
        write(f"Required permissions added successfully! ({len(result.grants)} grants)")
        write("")

        write("Step 4: Generating admin consent URL...")
        consent_url = build_consent_url(application.app_id, credential.tenant_id, config.login_base_url)
        write(f"Admin Consent URL: {consent_url}")
        write("")

        if _wants_browser(args, read):
            if diagnostics.run_best_effort("Open browser", lambda: open_consent_url(consent_url, opener)):
                write("Admin consent URL opened in browser.")
            else:
                write(f"Could not open browser: {diagnostics.failures[-1][1]}")
                write("Please manually navigate to the URL above.")

        summary = render_summary(request, result, credential, consent_url)
        write("")
        write(summary)

        path = diagnostics.run_best_effort(
            "Write summary file",
            lambda: write_summary_file(summary, request.name, config.output_dir),
        )
        if path is not None:
            write(f"📄 Summary written to file: {path}")
        else:
            write(f"❌ Failed to write summary to file: {diagnostics.failures[-1][1]}")

        audit.safe_log_event(
            "registration_completed",
            request.name,
            operator=credential.username,
            tenant_id=credential.tenant_id,
            details={
                "app_id": application.app_id,
                "object_id": application.object_id,
                "secret_expiry": secret.expiry.isoformat(),
                "grant_count": len(result.grants),
                "warnings": [label for label, _ in diagnostics.failures],
            },
        )
    except KeyboardInterrupt:
        write("")
        write("❌ Aborted by operator.")
        _audit_failure(app_name, credential, "aborted by operator")
        exit_code = 1
    except Exception as exc:
        write(f"❌ Error: {exc}")
        if exc.__cause__ is not None:
            write(f"Details: {exc.__cause__}")
        if isinstance(exc, ProvisioningError) and exc.secret is not None:
            write(f"Client Secret (save it now, it won't be shown again): {exc.secret.secret_text}")
            write(CONSENT_REMINDER)
        _audit_failure(app_name, credential, str(exc), getattr(exc, "step", None))
        exit_code = 1

    if not args.no_pause:
        write("")
        try:
            read("Press Enter to exit...")
        except (EOFError, KeyboardInterrupt):
            pass

    return exit_code


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(run_session(args))


if __name__ == "__main__":
    main()
