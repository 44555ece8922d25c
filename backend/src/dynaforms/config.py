"""Engine settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EngineSettings:
    """Runtime settings for the validation engine.

    Attributes:
        fail_open: Treat an unregistered custom/async validator or an
            uncompilable pattern as a pass. When False, the rule fails instead.
        validator_modules: Dotted module paths whose ``register_validators``
            hook populates the registries at startup
        log_level: Root log level for the API and CLI entry points
    """

    fail_open: bool = True
    validator_modules: tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> EngineSettings:
        """Create settings from environment variables.

        - DYNAFORMS_FAIL_OPEN: "false"/"0"/"no"/"off" disables fail-open (default on)
        - DYNAFORMS_VALIDATOR_MODULES: comma-separated dotted module paths
        - DYNAFORMS_LOG_LEVEL: logging level name (default INFO; unknown names fall back to INFO)
        """
        fail_open = os.environ.get("DYNAFORMS_FAIL_OPEN", "true").strip().lower() not in _FALSY

        modules_raw = os.environ.get("DYNAFORMS_VALIDATOR_MODULES", "")
        modules = tuple(m.strip() for m in modules_raw.split(",") if m.strip())

        log_level = os.environ.get("DYNAFORMS_LOG_LEVEL", "INFO").strip().upper()
        if log_level not in logging.getLevelNamesMapping():
            log_level = "INFO"

        return cls(fail_open=fail_open, validator_modules=modules, log_level=log_level)
