"""Loading session discovery providers from configuration."""

from __future__ import annotations

import importlib
import logging

from ..config import ConfigError
from .reporter import SessionDiscovery

_logger = logging.getLogger("mediabridge.discovery")


def load_discovery(provider: str) -> SessionDiscovery | None:
    """Resolve a ``"package.module:callable"`` provider string.

    The callable takes no arguments and returns the currently active
    sessions, most relevant first. An empty string means no provider.
    """
    if not provider:
        return None

    module_name, sep, attr = provider.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Discovery provider must look like 'module:callable', got '{provider}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import discovery module '{module_name}': {e}") from e

    target = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigError(f"'{module_name}' has no attribute '{attr}'") from e

    if not callable(target):
        raise ConfigError(f"Discovery provider '{provider}' is not callable")

    _logger.info(f"Using discovery provider {provider}")
    return target
