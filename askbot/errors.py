# Exceptions raised by collaborators, plus the best-effort call wrapper used
# wherever a collaborator is optional.

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class CollaboratorError(RuntimeError):
    """A collaborator answered, but with a payload we cannot use."""


class GenerationError(CollaboratorError):
    """The generation collaborator reported failure or an embedded error."""


class UnknownPageError(KeyError):
    """No page-data extractor exists for the requested page id."""


def degrade(
    fn: Callable[..., T],
    *args: Any,
    default: T,
    label: str,
    logger: logging.Logger,
    **kwargs: Any,
) -> T:
    """Call fn; on any exception log it under `label` and return `default`."""
    try:
        return fn(*args, **kwargs)
    except Exception:
        logger.warning("%s failed; continuing without it", label, exc_info=True)
        return default
