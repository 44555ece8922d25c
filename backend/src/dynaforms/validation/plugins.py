"""Validator plug-in loading.

Applications ship their custom and async validators in ordinary modules that
expose a registration hook:

    # myapp/validators.py
    def register_validators(registry, async_registry):
        registry.register("postcode", postcode)
        async_registry.register("checkEmailExists", check_email_exists)

The API app and CLI load the modules named in
``EngineSettings.validator_modules`` (or ``--validators``) at startup.
"""

import importlib
import logging
from collections.abc import Iterable

from dynaforms.validation.registry import AsyncValidatorRegistry, ValidatorRegistry

logger = logging.getLogger(__name__)

REGISTER_HOOK = "register_validators"


class PluginError(ImportError):
    """A validator module could not be imported or has no registration hook."""


def load_validator_modules(
    module_names: Iterable[str],
    registry: ValidatorRegistry,
    async_registry: AsyncValidatorRegistry,
) -> list[str]:
    """Import each module and call its ``register_validators`` hook.

    Args:
        module_names: Dotted module paths, in registration order
        registry: Receives custom validators
        async_registry: Receives async validators

    Returns:
        Names of the modules that were loaded

    Raises:
        PluginError: If a module cannot be imported or lacks the hook
    """
    loaded: list[str] = []
    for module_name in module_names:
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise PluginError(f"Cannot import validator module '{module_name}': {e}") from e

        hook = getattr(module, REGISTER_HOOK, None)
        if not callable(hook):
            raise PluginError(f"Validator module '{module_name}' has no {REGISTER_HOOK}() function")

        hook(registry, async_registry)
        logger.info("Loaded validator module %s", module_name)
        loaded.append(module_name)

    return loaded
