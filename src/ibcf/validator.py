"""
Structural, temporal and semantic checks for IBCF frame documents.

The validator never raises for a bad frame; every violated rule is reported
in ``ValidationResult.errors``. Warnings never affect ``valid``.

NOTE: signatures are only checked for shape. Cryptographic verification is
not performed here and must be layered on by callers that need it.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Mapping

from .domain_types import LONG_DURATION_SECONDS, SUPPORTED_VERSIONS, ValidationResult
from .timestamps import SystemClock, as_utc, effective_expiry, format_timestamp, parse_timestamp

__all__ = ["validate_frame"]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_frame(candidate: Any, now: datetime | None = None) -> ValidationResult:
    """
    Validate a deserialized frame document.

    Args:
        candidate: Value produced by a JSON or YAML loader.
        now: Reference instant for temporal warnings (defaults to wall-clock).

    Returns:
        ValidationResult with accumulated errors and warnings.
    """
    if not isinstance(candidate, Mapping):
        return ValidationResult(valid=False, errors=("Frame must be an object",), warnings=())

    current = as_utc(now) if now is not None else SystemClock().now()
    errors: list[str] = []
    warnings: list[str] = []

    version = candidate.get("version")
    if not isinstance(version, str):
        errors.append('version must be a string (e.g. "v0.1")')
    elif version not in SUPPORTED_VERSIONS:
        supported = ", ".join(sorted(SUPPORTED_VERSIONS))
        errors.append(f"version {version!r} is not supported (supported: {supported})")

    for name in ("issuer", "subject", "intent"):
        if not _is_non_empty_string(candidate.get(name)):
            errors.append(f"{name} must be a non-empty string")

    actions = candidate.get("allowedActions")
    if not isinstance(actions, (list, tuple)):
        errors.append("allowedActions must be an array of strings")
    else:
        for index, action in enumerate(actions):
            if not _is_non_empty_string(action):
                errors.append(f"allowedActions[{index}] must be a non-empty string")
        if not actions:
            warnings.append("allowedActions is empty; no actions can be executed")

    duration = candidate.get("durationSeconds")
    duration_ok = _is_number(duration) and (isinstance(duration, int) or math.isfinite(duration)) and duration > 0
    if not duration_ok:
        errors.append("durationSeconds must be a positive, finite number (seconds)")
    elif duration > LONG_DURATION_SECONDS:
        warnings.append(
            f"durationSeconds {duration} exceeds 30 days ({LONG_DURATION_SECONDS} seconds)"
        )

    issued = parse_timestamp(candidate.get("issuedAt"))
    if issued is None:
        errors.append("issuedAt must be a valid ISO 8601 timestamp")

    expires = None
    expires_ok = True
    if candidate.get("expiresAt") is not None:
        expires = parse_timestamp(candidate["expiresAt"])
        if expires is None:
            expires_ok = False
            errors.append("expiresAt must be a valid ISO 8601 timestamp")
        elif issued is not None and expires <= issued:
            expires_ok = False
            errors.append("expiresAt must be later than issuedAt")

    metadata = candidate.get("metadata")
    if metadata is not None and not isinstance(metadata, Mapping):
        errors.append("metadata must be an object")

    signature = candidate.get("signature")
    if signature is not None:
        if not isinstance(signature, str):
            errors.append("signature must be a string")
        else:
            warnings.append("signature is present but not cryptographically verified")

    if issued is not None and expires_ok and (expires is not None or duration_ok):
        expiry = effective_expiry(issued, duration, expires)
        if current < issued:
            warnings.append(f"frame is not yet active at {format_timestamp(current)}")
        elif current > expiry:
            warnings.append(f"frame is expired at {format_timestamp(current)}")

    return ValidationResult(valid=not errors, errors=tuple(errors), warnings=tuple(warnings))
