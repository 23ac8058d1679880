from __future__ import annotations

from typing import Sequence

__all__ = [
    "FrameExpiredError",
    "FrameLoadError",
    "FrameNotYetActiveError",
    "FrameRuntimeError",
    "InvalidFrameError",
    "MalformedTimestampError",
]


class FrameRuntimeError(RuntimeError):
    """Raised when a runtime cannot be constructed for a frame."""


class InvalidFrameError(FrameRuntimeError):
    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        super().__init__("Invalid frame: " + "; ".join(self.errors))


class MalformedTimestampError(FrameRuntimeError):
    def __init__(self, field_name: str, value: object) -> None:
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} is not a valid date: {value!r}")


class FrameNotYetActiveError(FrameRuntimeError):
    def __init__(self, message: str = "Frame is not yet active") -> None:
        super().__init__(message)


class FrameExpiredError(FrameRuntimeError):
    def __init__(self, message: str = "Frame is expired") -> None:
        super().__init__(message)


class FrameLoadError(RuntimeError):
    """Raised when a frame document cannot be read or decoded."""

    def __init__(self, location: str, message: str) -> None:
        super().__init__(message)
        self.location = location

    def __str__(self) -> str:
        return f"[{self.location}] {super().__str__()}"
