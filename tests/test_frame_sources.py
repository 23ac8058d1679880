from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from ibcf.errors import FrameLoadError, InvalidFrameError
from ibcf.frame_source import FileFrameSource, StaticFrameSource, decode_document, load_frame
from ibcf.http_frame_source import HttpFrameSource

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

FRAME = {
    "version": "v0.1",
    "issuer": "issuer.test",
    "subject": "subject.test",
    "intent": "demo",
    "allowedActions": ["echo.message"],
    "durationSeconds": 600,
    "issuedAt": "2024-05-01T12:00:00Z",
}

FRAME_YAML = """\
version: v0.1
issuer: issuer.test
subject: subject.test
intent: demo
allowedActions:
  - echo.message
durationSeconds: 600
issuedAt: 2024-05-01T12:00:00Z
"""


def test_json_and_yaml_files_are_interchangeable(tmp_path: Path) -> None:
    json_path = tmp_path / "frame.json"
    json_path.write_text(json.dumps(FRAME), encoding="utf-8")
    yaml_path = tmp_path / "frame.YML"
    yaml_path.write_text(FRAME_YAML, encoding="utf-8")

    from_json = load_frame(FileFrameSource(json_path), now=NOW)
    from_yaml = load_frame(FileFrameSource(yaml_path), now=NOW)
    assert from_json == from_yaml


def test_unsupported_extension(tmp_path: Path) -> None:
    path = tmp_path / "frame.txt"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(FrameLoadError, match="Unsupported file extension: .txt"):
        FileFrameSource(path).fetch()
    with pytest.raises(FrameLoadError, match=r"\(none\)"):
        FileFrameSource(tmp_path / "frame").fetch()


def test_missing_file_is_a_load_error(tmp_path: Path) -> None:
    with pytest.raises(FrameLoadError, match="Could not read file"):
        FileFrameSource(tmp_path / "absent.json").fetch()


def test_decode_errors_are_load_errors() -> None:
    with pytest.raises(FrameLoadError, match="JSON"):
        decode_document("{not json", "json")
    with pytest.raises(FrameLoadError, match="YAML"):
        decode_document("a: [unclosed", "yaml")


def test_load_frame_raises_on_invalid_document() -> None:
    with pytest.raises(InvalidFrameError) as excinfo:
        load_frame(StaticFrameSource({"version": "v0.1"}), now=NOW)
    assert any("issuer" in err for err in excinfo.value.errors)


def test_http_source_sends_token_and_decodes_json() -> None:
    source = HttpFrameSource(url="https://frames.example/grants/1", token="secret-token")
    with patch.object(httpx.Client, "get") as mock_get:
        mock_get.return_value.text = json.dumps(FRAME)
        mock_get.return_value.headers = {"content-type": "application/json"}
        document = source.fetch()

    assert document == FRAME
    headers = mock_get.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer secret-token"


def test_http_source_uses_yaml_content_type() -> None:
    source = HttpFrameSource(url="https://frames.example/grants/1")
    with patch.object(httpx.Client, "get") as mock_get:
        mock_get.return_value.text = FRAME_YAML
        mock_get.return_value.headers = {"content-type": "application/yaml"}
        frame = load_frame(source, now=NOW)
    assert frame.allowed_actions == ("echo.message",)
    assert "Authorization" not in source.headers


def test_http_source_prefers_url_suffix() -> None:
    source = HttpFrameSource(url="https://frames.example/grant.yaml?rev=2")
    with patch.object(httpx.Client, "get") as mock_get:
        mock_get.return_value.text = FRAME_YAML
        mock_get.return_value.headers = {"content-type": "text/plain"}
        assert source.fetch()["intent"] == "demo"


def test_http_errors_become_load_errors() -> None:
    source = HttpFrameSource(url="https://frames.example/grants/1")
    with patch.object(httpx.Client, "get", side_effect=httpx.ConnectError("refused")):
        with pytest.raises(FrameLoadError, match="Request failed"):
            source.fetch()


@pytest.mark.integration
def test_http_source_init_does_not_connect() -> None:
    source = HttpFrameSource(url="http://invalid.local/frame.json")
    assert source.location == "http://invalid.local/frame.json"
