"""Demo handler table used by the ``ibcf run`` command."""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from .runtime import ActionHandler

logger = logging.getLogger(__name__)


async def echo_message(payload: Any) -> dict[str, Any]:
    return {"echoed": payload}


def log_message(payload: Any) -> dict[str, Any]:
    text = payload.get("text") if isinstance(payload, Mapping) else payload
    if text is None:
        raise ValueError("log.message requires a 'text' field")
    logger.info("log.message: %s", text)
    return {"ok": True}


BUILTIN_HANDLERS: Mapping[str, ActionHandler] = MappingProxyType(
    {
        "echo.message": echo_message,
        "log.message": log_message,
    }
)
