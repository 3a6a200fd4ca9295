import json
import logging
import sys

import httpx
import pytest

from wxcc_overrides import config
from wxcc_overrides.errors import ConfigurationError
from wxcc_overrides.logging_config import build_json_formatter, log_wxcc_api_error


def make_record(msg, level=logging.INFO, exc_info=None, **extra):
    return logging.getLogger("wxcc_overrides").makeRecord(
        "wxcc_overrides", level, __file__, 1, msg, (), exc_info, extra=extra
    )


def test_json_formatter_includes_extra_fields():
    record = make_record("API Call", type="api_call", status=200, duration=12.5)

    entry = json.loads(build_json_formatter("wxcc-overrides-api", "test").format(record))

    assert entry["message"] == "API Call"
    assert entry["level"] == "info"
    assert entry["logger"] == "wxcc_overrides"
    assert entry["service"] == "wxcc-overrides-api"
    assert entry["environment"] == "test"
    assert entry["type"] == "api_call"
    assert entry["status"] == 200
    assert entry["duration"] == 12.5
    assert "timestamp" in entry


def test_json_formatter_renders_exceptions():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = make_record("Unhandled error", level=logging.ERROR, exc_info=sys.exc_info())

    entry = json.loads(build_json_formatter("wxcc-overrides-api", "test").format(record))

    assert entry["level"] == "error"
    assert "RuntimeError: boom" in entry["exception"]


def test_wxcc_error_details_are_extracted(caplog):
    request = httpx.Request("PUT", "https://wxcc.test/organization/org-1/overrides/c-1")
    response = httpx.Response(
        400, request=request, json={"message": "bad override", "code": "E_OVERRIDE", "details": ["x"]}
    )
    error = httpx.HTTPStatusError("400 Bad Request", request=request, response=response)

    with caplog.at_level(logging.ERROR, logger="wxcc_overrides"):
        log_wxcc_api_error("update_override", error, {"containerId": "c-1"})

    record = caplog.records[-1]
    assert record.type == "wxcc_api_error"
    assert record.status == 400
    assert record.wxccErrorMessage == "bad override"
    assert record.wxccErrorCode == "E_OVERRIDE"
    assert record.context == {"containerId": "c-1"}


def test_validate_config_requires_token(monkeypatch):
    monkeypatch.setattr(config, "WXCC_MOCK_MODE", False)
    monkeypatch.setattr(config, "WXCC_ACCESS_TOKEN", "")

    with pytest.raises(ConfigurationError):
        config.validate_config()


def test_validate_config_skipped_in_mock_mode(monkeypatch):
    monkeypatch.setattr(config, "WXCC_MOCK_MODE", True)
    monkeypatch.setattr(config, "WXCC_ACCESS_TOKEN", "")

    config.validate_config()
