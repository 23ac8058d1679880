from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest
from ibcf.validator import validate_frame

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _frame(**overrides: Any) -> dict[str, Any]:
    frame: dict[str, Any] = {
        "version": "v0.1",
        "issuer": "issuer.test",
        "subject": "subject.test",
        "intent": "demo",
        "allowedActions": ["log.message"],
        "durationSeconds": 60,
        "issuedAt": NOW.isoformat(),
    }
    frame.update(overrides)
    return frame


def test_valid_minimal_frame_passes() -> None:
    result = validate_frame(_frame(), now=NOW)
    assert result.valid is True
    assert result.errors == ()
    assert result.warnings == ()


def test_missing_required_fields_reported_per_field() -> None:
    result = validate_frame({}, now=NOW)
    assert result.valid is False
    for name in ("version", "issuer", "subject", "intent", "allowedActions", "durationSeconds", "issuedAt"):
        assert sum(name in msg for msg in result.errors) == 1, name


@pytest.mark.parametrize("candidate", [None, [], ["a"], "frame", 42])
def test_non_object_short_circuits(candidate: Any) -> None:
    result = validate_frame(candidate, now=NOW)
    assert result.valid is False
    assert result.errors == ("Frame must be an object",)


def test_unsupported_version_is_an_error() -> None:
    result = validate_frame(_frame(version="v9.9"), now=NOW)
    assert result.valid is False
    assert any("not supported" in msg for msg in result.errors)


def test_non_string_version_is_an_error() -> None:
    result = validate_frame(_frame(version=0.1), now=NOW)
    assert any(msg.startswith("version must be a string") for msg in result.errors)


@pytest.mark.parametrize("name", ["issuer", "subject", "intent"])
def test_whitespace_only_identity_fields_rejected(name: str) -> None:
    result = validate_frame(_frame(**{name: "   "}), now=NOW)
    assert result.errors == (f"{name} must be a non-empty string",)


@pytest.mark.parametrize("duration", [0, -5, "60", None, True, float("nan"), float("inf")])
def test_bad_duration_rejected(duration: Any) -> None:
    result = validate_frame(_frame(durationSeconds=duration), now=NOW)
    assert result.valid is False
    assert any("durationSeconds" in msg for msg in result.errors)


def test_long_duration_is_only_a_warning() -> None:
    result = validate_frame(_frame(durationSeconds=2_592_001), now=NOW)
    assert result.valid is True
    assert any("exceeds 30 days" in msg for msg in result.warnings)


def test_thirty_day_duration_has_no_warning() -> None:
    result = validate_frame(_frame(durationSeconds=2_592_000), now=NOW)
    assert result.warnings == ()


def test_empty_allowed_actions_warns() -> None:
    result = validate_frame(_frame(allowedActions=[]), now=NOW)
    assert result.valid is True
    assert result.warnings == ("allowedActions is empty; no actions can be executed",)


def test_allowed_actions_elements_checked_individually() -> None:
    result = validate_frame(_frame(allowedActions=["ok", "", 3]), now=NOW)
    assert result.errors == (
        "allowedActions[1] must be a non-empty string",
        "allowedActions[2] must be a non-empty string",
    )


def test_allowed_actions_string_is_not_an_array() -> None:
    result = validate_frame(_frame(allowedActions="log.message"), now=NOW)
    assert result.errors == ("allowedActions must be an array of strings",)


def test_duplicate_actions_accepted() -> None:
    result = validate_frame(_frame(allowedActions=["a", "a"]), now=NOW)
    assert result.valid is True


def test_invalid_date_formats_rejected() -> None:
    result = validate_frame(_frame(issuedAt="not-a-date", expiresAt="also-not-a-date"), now=NOW)
    assert result.valid is False
    assert any("issuedAt" in msg for msg in result.errors)
    assert any("expiresAt" in msg for msg in result.errors)


@pytest.mark.parametrize("delta", [timedelta(0), timedelta(seconds=-1)])
def test_expires_at_not_after_issued_at_rejected(delta: timedelta) -> None:
    result = validate_frame(_frame(expiresAt=(NOW + delta).isoformat()), now=NOW)
    assert result.valid is False
    assert result.errors == ("expiresAt must be later than issuedAt",)


def test_expires_ordering_skipped_when_issued_unparseable() -> None:
    result = validate_frame(_frame(issuedAt="garbage", expiresAt=NOW.isoformat()), now=NOW)
    assert result.errors == ("issuedAt must be a valid ISO 8601 timestamp",)


def test_null_optional_fields_are_absent() -> None:
    result = validate_frame(_frame(expiresAt=None, metadata=None, signature=None), now=NOW)
    assert result.valid is True


def test_zulu_and_yaml_timestamps_accepted() -> None:
    assert validate_frame(_frame(issuedAt="2024-05-01T12:00:00.000Z"), now=NOW).valid
    assert validate_frame(_frame(issuedAt=NOW.replace(tzinfo=None)), now=NOW).valid
    assert validate_frame(_frame(issuedAt=date(2024, 5, 1), durationSeconds=86_400), now=NOW).valid


@pytest.mark.parametrize("metadata", [["a"], "text", 3])
def test_metadata_must_be_object(metadata: Any) -> None:
    result = validate_frame(_frame(metadata=metadata), now=NOW)
    assert result.errors == ("metadata must be an object",)


def test_signature_shape_only() -> None:
    bad = validate_frame(_frame(signature=123), now=NOW)
    assert bad.errors == ("signature must be a string",)

    good = validate_frame(_frame(signature="anything"), now=NOW)
    assert good.valid is True
    assert "signature is present but not cryptographically verified" in good.warnings


def test_errors_accumulate_across_fields() -> None:
    result = validate_frame(_frame(version="v2", issuer="", durationSeconds=-1, metadata=[]), now=NOW)
    assert len(result.errors) == 4


def test_temporal_state_reported_as_warning() -> None:
    expired = validate_frame(_frame(), now=NOW + timedelta(minutes=5))
    assert expired.valid is True
    assert any("expired" in msg for msg in expired.warnings)

    pending = validate_frame(_frame(), now=NOW - timedelta(minutes=5))
    assert pending.valid is True
    assert any("not yet active" in msg for msg in pending.warnings)


def test_validation_is_pure_and_idempotent() -> None:
    candidate = _frame(metadata={"k": "v"}, allowedActions=[])
    snapshot = dict(candidate)
    assert validate_frame(candidate, now=NOW) == validate_frame(candidate, now=NOW)
    assert candidate == snapshot
