from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .errors import MalformedTimestampError
from .timestamps import effective_expiry, format_timestamp, parse_timestamp

SUPPORTED_VERSIONS: frozenset[str] = frozenset({"v0.1"})

# Thirty days; longer grants are legal but flagged.
LONG_DURATION_SECONDS = 30 * 24 * 60 * 60


def _empty_metadata() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Frame:
    version: str
    issuer: str
    subject: str
    intent: str
    allowed_actions: tuple[str, ...]
    duration_seconds: float
    issued_at: datetime
    expires_at: datetime | None = None
    metadata: Mapping[str, Any] = field(default_factory=_empty_metadata)
    signature: str | None = None

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Frame":
        """Build a Frame from a document that has already passed validation."""
        issued_at = parse_timestamp(document.get("issuedAt"))
        if issued_at is None:
            raise MalformedTimestampError("issuedAt", document.get("issuedAt"))

        raw_expires = document.get("expiresAt")
        expires_at = None
        if raw_expires is not None:
            expires_at = parse_timestamp(raw_expires)
            if expires_at is None:
                raise MalformedTimestampError("expiresAt", raw_expires)

        metadata = document.get("metadata") or {}
        return cls(
            version=document["version"],
            issuer=document["issuer"],
            subject=document["subject"],
            intent=document["intent"],
            allowed_actions=tuple(document["allowedActions"]),
            duration_seconds=document["durationSeconds"],
            issued_at=issued_at,
            expires_at=expires_at,
            metadata=MappingProxyType(dict(metadata)),
            signature=document.get("signature"),
        )

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "version": self.version,
            "issuer": self.issuer,
            "subject": self.subject,
            "intent": self.intent,
            "allowedActions": list(self.allowed_actions),
            "durationSeconds": self.duration_seconds,
            "issuedAt": format_timestamp(self.issued_at),
        }
        if self.expires_at is not None:
            document["expiresAt"] = format_timestamp(self.expires_at)
        if self.metadata:
            document["metadata"] = dict(self.metadata)
        if self.signature is not None:
            document["signature"] = self.signature
        return document

    @property
    def effective_expiry(self) -> datetime:
        return effective_expiry(self.issued_at, self.duration_seconds, self.expires_at)

    def allows(self, action: str) -> bool:
        return action in self.allowed_actions

    def is_active(self, now: datetime) -> bool:
        return self.issued_at <= now <= self.effective_expiry


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: Sequence[str]
    warnings: Sequence[str]


@dataclass(frozen=True)
class ExecutionResult:
    success: bool
    data: Any = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("a successful result cannot carry an error")
        if not self.success:
            if not self.error:
                raise ValueError("a failed result must carry an error message")
            if self.data is not None:
                raise ValueError("a failed result cannot carry data")

    @classmethod
    def ok(cls, data: Any) -> "ExecutionResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "ExecutionResult":
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}
