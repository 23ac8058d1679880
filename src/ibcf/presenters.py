from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from .ansi_colors import FG_GREEN, FG_RED, FG_YELLOW, ColorMode, style
from .domain_types import ExecutionResult, Frame, ValidationResult
from .timestamps import format_timestamp

_PLAIN = ColorMode(enabled=False)

MANY_ACTIONS = 5
LONG_REVIEW_SECONDS = 7 * 24 * 60 * 60


def render_validation_outcome(result: ValidationResult, mode: ColorMode = _PLAIN) -> str:
    if result.valid:
        lines = [style("VALID", mode=mode, fg=FG_GREEN, bold=True)]
    else:
        lines = [style("INVALID", mode=mode, fg=FG_RED, bold=True)]
    if result.errors:
        lines.append("Errors:")
        lines.extend(style(f"- {err}", mode=mode, fg=FG_RED) for err in result.errors)
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(style(f"- {warning}", mode=mode, fg=FG_YELLOW) for warning in result.warnings)
    return "\n".join(lines)


def frame_risks(frame: Frame) -> list[str]:
    risks = []
    if len(frame.allowed_actions) > MANY_ACTIONS:
        risks.append("Frame allows many actions; review necessity.")
    if frame.duration_seconds > LONG_REVIEW_SECONDS:
        risks.append("Duration exceeds 7 days; consider shortening.")
    if frame.expires_at is None:
        risks.append("No explicit expiresAt; relying solely on durationSeconds.")
    return risks


def render_frame_explanation(frame: Frame, now: datetime | None = None) -> str:
    if frame.expires_at is not None:
        expires = format_timestamp(frame.expires_at)
    else:
        expires = f"+{frame.duration_seconds}s after issuance ({format_timestamp(frame.effective_expiry)})"
    lines = [
        f"Issuer: {frame.issuer}",
        f"Subject: {frame.subject}",
        f"Intent: {frame.intent}",
        f"Allowed actions: {', '.join(frame.allowed_actions) or '(none)'}",
        f"Issued at: {format_timestamp(frame.issued_at)}",
        f"Expires at: {expires}",
    ]
    if now is not None:
        status = "active" if frame.is_active(now) else "inactive"
        lines.append(f"Status at {format_timestamp(now)}: {status}")
    risks = frame_risks(frame)
    if risks:
        lines.append("Risks / Notes:")
        lines.extend(f"- {risk}" for risk in risks)
    return "\n".join(lines)


def render_execution_result(result: ExecutionResult) -> str:
    return json.dumps(result.to_dict(), indent=2, sort_keys=True, default=_fallback)


def _fallback(value: Any) -> str:
    return repr(value)
