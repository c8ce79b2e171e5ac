"""Loading of caller-supplied factories from `module:attribute` import paths.

Origination clients and signers are owned by the caller (they hold keys and
wallet sessions). The CLI receives them as import paths in settings
(`TARGET_CLIENT_FACTORY`, `SIGNER_FACTORY`) and resolves them here.
"""
from __future__ import annotations

import importlib
import logging
from typing import Any, Callable

from .errors import FactoryImportError

logger = logging.getLogger(__name__)

__all__ = ["load_factory"]


def load_factory(path: str) -> Callable[..., Any]:
    """Import `module:attribute` and return the callable it names."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise FactoryImportError(path, "expected 'module:attribute'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise FactoryImportError(path, str(e)) from e
    target: Any = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise FactoryImportError(path, f"no attribute {part!r}") from e
    if not callable(target):
        raise FactoryImportError(path, "not callable")
    logger.debug("Loaded factory %s", path)
    return target
