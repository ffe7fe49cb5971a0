"""Registration summary and best-effort side actions (browser, summary file)."""
from __future__ import annotations
import logging
import webbrowser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, TypeVar

from appreg.core.models import Credential, ProvisioningRequest, ProvisioningResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONSENT_REMINDER = "⚠️  Remember to complete admin consent using the URL provided above!"
COMPLETED_LINE = "✅ Application registration completed successfully!"


@dataclass
class Diagnostics:
    """Non-fatal failures collected during a session."""

    failures: list[tuple[str, str]] = field(default_factory=list)

    def run_best_effort(self, label: str, func: Callable[[], T]) -> Optional[T]:
        """Run a side action; record and log its failure instead of raising."""
        try:
            return func()
        except Exception as exc:
            logger.warning("%s failed: %s", label, exc)
            self.failures.append((label, str(exc)))
            return None

    def __bool__(self) -> bool:
        return bool(self.failures)


def render_summary(
    request: ProvisioningRequest,
    result: ProvisioningResult,
    credential: Credential,
    consent_url: str,
) -> str:
    """Render the registration summary shown on the console and saved to disk."""
    application = result.application
    secret = result.secret
    return "\n".join([
        "=== Registration Summary ===",
        f"Application Name: {request.name}",
        f"Application ID:   {application.app_id}",
        f"Object ID:        {application.object_id}",
        f"Client Secret:    {secret.secret_text}",
        f"Secret Expiry:    {secret.expiry.isoformat(sep=' ', timespec='seconds')}",
        f"Tenant ID:        {credential.tenant_id}",
        f"Consent URL:      {consent_url}",
        "",
        CONSENT_REMINDER,
        COMPLETED_LINE,
        "",
    ])


def summary_path(app_name: str, output_dir: str | Path = ".") -> Path:
    return Path(output_dir) / f"{app_name}.txt"


def write_summary_file(summary: str, app_name: str, output_dir: str | Path = ".") -> Path:
    """Write the summary to ``{app_name}.txt``, replacing any earlier file.

    Raises:
        OSError: If the file cannot be written
    """
    path = summary_path(app_name, output_dir)
    path.write_text(summary, encoding="utf-8")
    return path


def open_consent_url(url: str, opener: Callable[[str], bool] = webbrowser.open) -> bool:
    """Open the consent URL in the local browser.

    Raises:
        RuntimeError: If no browser could be launched
    """
    if not opener(url):
        raise RuntimeError("no runnable browser found")
    return True
