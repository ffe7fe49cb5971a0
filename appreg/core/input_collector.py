"""Operator prompts producing a validated ProvisioningRequest."""
from __future__ import annotations
import enum
from typing import Callable, Optional

from appreg.config.settings import AppConfig, settings
from appreg.core.models import ProvisioningRequest
from appreg.core.validators import (
    normalize_app_name,
    parse_secret_validity_days,
    validate_redirect_uri,
)


class PromptState(enum.Enum):
    PROMPTING = "prompting"
    VALIDATED = "validated"


class InputCollector:
    """Collect the three registration fields from the console.

    ``read`` and ``write`` default to ``input`` and ``print`` and are replaced
    by fakes in tests. Values passed as ``preset_*`` (command-line flags) go
    through the same rules as typed answers.

    End of input and Ctrl-C propagate to the caller; the redirect URI loop
    otherwise re-prompts until it gets a valid value.
    """

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
        config: Optional[AppConfig] = None,
    ):
        self.read = read
        self.write = write
        self.config = config or settings

    def collect_name(self, preset: Optional[str] = None) -> str:
        default = self.config.default_app_name
        if preset is not None and preset.strip():
            return normalize_app_name(preset, default)
        raw = self.read(f"Enter application name (default: {default}): ")
        return normalize_app_name(raw, default)

    def collect_redirect_uri(self, preset: Optional[str] = None) -> str:
        marker = self.config.redirect_uri_marker
        state = PromptState.PROMPTING
        value = ""
        pending = preset

        while state is PromptState.PROMPTING:
            if pending is not None:
                raw, pending = pending, None
            else:
                raw = self.read(f"Enter redirect URI (e.g., {self.config.redirect_uri_example}): ")
            try:
                value = validate_redirect_uri(raw, marker, self.config.redirect_uri_example)
            except ValueError as exc:
                self.write(f"❌ {exc}")
                continue
            state = PromptState.VALIDATED

        return value

    def collect_secret_validity_days(self, preset: Optional[str] = None) -> int:
        default = self.config.default_secret_validity_days
        if preset is not None:
            return parse_secret_validity_days(preset, default)
        raw = self.read(f"Enter client secret validity in days (default: {default}): ")
        return parse_secret_validity_days(raw, default)

    def collect(
        self,
        name: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        secret_days: Optional[str] = None,
    ) -> ProvisioningRequest:
        """Prompt for every field not supplied and build the request."""
        return ProvisioningRequest(
            name=self.collect_name(name),
            redirect_uri=self.collect_redirect_uri(redirect_uri),
            secret_validity_days=self.collect_secret_validity_days(secret_days),
        )
