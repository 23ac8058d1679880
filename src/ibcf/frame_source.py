from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

import yaml

from .domain_types import Frame
from .errors import FrameLoadError, InvalidFrameError
from .validator import validate_frame

__all__ = [
    "FileFrameSource",
    "FrameSource",
    "StaticFrameSource",
    "decode_document",
    "format_for_suffix",
    "load_frame",
]

logger = logging.getLogger(__name__)

_SUFFIX_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


class FrameSource(Protocol):
    location: str

    def fetch(self) -> Any: ...


def format_for_suffix(suffix: str) -> str | None:
    return _SUFFIX_FORMATS.get(suffix.lower())


def decode_document(text: str, fmt: str, *, location: str = "<memory>") -> Any:
    """Decode a JSON or YAML frame document into plain Python values."""
    try:
        if fmt == "yaml":
            return yaml.safe_load(text)
        if fmt == "json":
            return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise FrameLoadError(location, f"Could not parse {fmt.upper()}: {exc}") from exc
    raise FrameLoadError(location, f"Unsupported document format: {fmt}")


@dataclass(frozen=True)
class FileFrameSource:
    path: Path

    @property
    def location(self) -> str:
        return str(self.path)

    def fetch(self) -> Any:
        suffix = self.path.suffix
        fmt = format_for_suffix(suffix)
        if fmt is None:
            raise FrameLoadError(self.location, f"Unsupported file extension: {suffix or '(none)'}")
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FrameLoadError(self.location, f"Could not read file: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise FrameLoadError(self.location, f"File is not valid UTF-8: {exc}") from exc
        logger.debug("Read %d bytes from %s", len(text), self.location)
        return decode_document(text, fmt, location=self.location)


@dataclass(frozen=True)
class StaticFrameSource:
    document: Any
    location: str = "<memory>"

    def fetch(self) -> Any:
        return self.document


def load_frame(source: FrameSource, now: datetime | None = None) -> Frame:
    """Fetch and validate a frame; raises InvalidFrameError if it does not pass."""
    document = source.fetch()
    result = validate_frame(document, now=now)
    if not result.valid:
        raise InvalidFrameError(result.errors)
    for warning in result.warnings:
        logger.info("%s: %s", source.location, warning)
    return Frame.from_document(document)
