from __future__ import annotations

import logging
from posixpath import splitext
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from .errors import FrameLoadError
from .frame_source import FrameSource, decode_document, format_for_suffix

logger = logging.getLogger(__name__)


class HttpFrameSource(FrameSource):
    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout_secs: float = 15.0,
    ) -> None:
        self.url = url
        self.token = token
        self.timeout = timeout_secs
        self.headers = {"Accept": "application/json, application/yaml;q=0.9, text/yaml;q=0.8"}
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    @property
    def location(self) -> str:
        return self.url

    def fetch(self) -> Any:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.get(self.url, headers=self.headers)
                resp.raise_for_status()
                text = resp.text
                content_type = resp.headers.get("content-type", "")
        except httpx.HTTPError as exc:
            raise FrameLoadError(self.url, f"Request failed: {exc}") from exc

        fmt = self._detect_format(content_type)
        logger.debug("Fetched %s as %s", self.url, fmt)
        return decode_document(text, fmt, location=self.url)

    def _detect_format(self, content_type: str) -> str:
        # URL suffix wins; servers often label YAML as text/plain
        fmt = format_for_suffix(splitext(urlparse(self.url).path)[1])
        if fmt is not None:
            return fmt
        return "yaml" if "yaml" in content_type.lower() else "json"
