from .domain_types import SUPPORTED_VERSIONS, ExecutionResult, Frame, ValidationResult
from .errors import (
    FrameExpiredError,
    FrameLoadError,
    FrameNotYetActiveError,
    FrameRuntimeError,
    InvalidFrameError,
    MalformedTimestampError,
)
from .frame_source import FileFrameSource, FrameSource, StaticFrameSource, load_frame
from .http_frame_source import HttpFrameSource
from .runtime import ActionHandler, FrameRuntime, create_runtime
from .timestamps import Clock, FixedClock, SystemClock
from .validator import validate_frame

__all__ = [
    "ActionHandler",
    "Clock",
    "ExecutionResult",
    "FileFrameSource",
    "FixedClock",
    "Frame",
    "FrameExpiredError",
    "FrameLoadError",
    "FrameNotYetActiveError",
    "FrameRuntime",
    "FrameRuntimeError",
    "FrameSource",
    "HttpFrameSource",
    "InvalidFrameError",
    "MalformedTimestampError",
    "SUPPORTED_VERSIONS",
    "StaticFrameSource",
    "SystemClock",
    "ValidationResult",
    "create_runtime",
    "load_frame",
    "validate_frame",
]
