"""Execution runtime enforcing a validated frame on every action dispatch."""
from __future__ import annotations

import inspect
import logging
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Protocol

from .domain_types import ExecutionResult, Frame
from .errors import FrameExpiredError, FrameNotYetActiveError, InvalidFrameError, MalformedTimestampError
from .timestamps import Clock, SystemClock, effective_expiry, parse_timestamp
from .validator import validate_frame

__all__ = ["ActionHandler", "FrameRuntime", "create_runtime"]

logger = logging.getLogger(__name__)

NOT_ALLOWED = "Action not allowed"
NO_HANDLER = "No handler registered"
NOT_YET_ACTIVE = "Frame is not yet active"
EXPIRED = "Frame is expired"


class ActionHandler(Protocol):
    def __call__(self, payload: Any) -> Any: ...


def _bind_handler(action: str, handler: Any) -> ActionHandler:
    invoke = getattr(handler, "invoke", None)
    if callable(invoke):
        return invoke
    if callable(handler):
        return handler
    raise TypeError(f"Handler for {action!r} must be callable or expose invoke(payload)")


class FrameRuntime:
    """
    Dispatches allowed actions to their handlers while the frame is active.

    Instances hold no mutable state: the frame, the validity window and the
    handler table are fixed at construction, so concurrent ``run`` calls are
    safe.
    """

    def __init__(
        self,
        frame: Frame,
        handlers: Mapping[str, ActionHandler],
        issued_at: datetime,
        expires_at: datetime,
        clock: Clock,
    ) -> None:
        self._frame = frame
        self._handlers = MappingProxyType(dict(handlers))
        self._issued_at = issued_at
        self._expires_at = expires_at
        self._clock = clock

    @property
    def frame(self) -> Frame:
        return self._frame

    @property
    def issued_at(self) -> datetime:
        return self._issued_at

    @property
    def expires_at(self) -> datetime:
        return self._expires_at

    @property
    def actions(self) -> tuple[str, ...]:
        return self._frame.allowed_actions

    async def run(self, action: str, payload: Any = None) -> ExecutionResult:
        """
        Dispatch ``action`` and report the outcome as data.

        Handler exceptions, including ``SystemExit``, become failed results.
        ``asyncio.CancelledError`` and ``KeyboardInterrupt`` still propagate.
        """
        if not self._frame.allows(action):
            logger.warning("Rejected %r for subject %r: not in allowedActions", action, self._frame.subject)
            return ExecutionResult.failure(NOT_ALLOWED)

        handler = self._handlers.get(action)
        if handler is None:
            logger.warning("Rejected %r: no handler registered", action)
            return ExecutionResult.failure(NO_HANDLER)

        now = self._clock.now()
        if now < self._issued_at:
            logger.warning("Rejected %r: frame not active until %s", action, self._issued_at.isoformat())
            return ExecutionResult.failure(NOT_YET_ACTIVE)
        if now > self._expires_at:
            logger.warning("Rejected %r: frame expired at %s", action, self._expires_at.isoformat())
            return ExecutionResult.failure(EXPIRED)

        logger.debug("Dispatching %r for subject %r", action, self._frame.subject)
        try:
            data = handler(payload)
            if inspect.isawaitable(data):
                data = await data
        except Exception as exc:
            logger.warning("Handler for %r failed: %s", action, exc, exc_info=True)
            return ExecutionResult.failure(str(exc) or type(exc).__name__)
        except SystemExit as exc:
            logger.warning("Handler for %r attempted to exit with status %r", action, exc.code)
            return ExecutionResult.failure(f"Handler exited with status {exc.code}")
        return ExecutionResult.ok(data)


def create_runtime(
    frame: Frame | Mapping[str, Any],
    handlers: Mapping[str, Any],
    *,
    clock: Clock | None = None,
) -> FrameRuntime:
    """
    Construct a runtime for ``frame``.

    Raises:
        InvalidFrameError: the frame fails validation.
        MalformedTimestampError: issuedAt or expiresAt cannot be parsed.
        FrameNotYetActiveError: the current time is before issuedAt.
        FrameExpiredError: the current time is after the effective expiry.
    """
    clock = clock or SystemClock()
    document = frame.to_document() if isinstance(frame, Frame) else frame

    validation = validate_frame(document, now=clock.now())
    if not validation.valid:
        raise InvalidFrameError(validation.errors)

    issued = parse_timestamp(document.get("issuedAt"))
    if issued is None:
        raise MalformedTimestampError("issuedAt", document.get("issuedAt"))

    expires = None
    if document.get("expiresAt") is not None:
        expires = parse_timestamp(document["expiresAt"])
        if expires is None:
            raise MalformedTimestampError("expiresAt", document["expiresAt"])
    expiry = effective_expiry(issued, document["durationSeconds"], expires)

    now = clock.now()
    if now < issued:
        raise FrameNotYetActiveError(NOT_YET_ACTIVE)
    if now > expiry:
        raise FrameExpiredError(EXPIRED)

    bound = {action: _bind_handler(action, handler) for action, handler in handlers.items()}
    runtime = FrameRuntime(
        frame=Frame.from_document(document),
        handlers=bound,
        issued_at=issued,
        expires_at=expiry,
        clock=clock,
    )
    logger.info(
        "Runtime created for subject %r (issuer %r), %d action(s), valid until %s",
        runtime.frame.subject,
        runtime.frame.issuer,
        len(runtime.actions),
        expiry.isoformat(),
    )
    return runtime
