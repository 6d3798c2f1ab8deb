"""Configuration loading and structured logging tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from closet_app.config import DEFAULT_GEMINI_MODEL, ClosetConfig
from closet_app.logging_config import (
    CORRELATION_ID,
    JsonFormatter,
    correlation_context,
    log_event,
    redact_for_log,
)

_ENV_KEYS = [
    "APP_ENV",
    "APP_CONFIG_PATH",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "SERPAPI_KEY",
    "RAKUTEN_APP_ID",
    "REQUEST_TIMEOUT_SECONDS",
    "CATALOG_STORE_BACKEND",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_environment() -> None:
    config = ClosetConfig.from_env()
    assert config.gemini_model == DEFAULT_GEMINI_MODEL
    assert config.request_timeout_seconds == 10.0
    assert config.catalog_store_backend == "json"
    assert config.configured_services() == {"gemini": False, "serpapi": False, "rakuten": False}


def test_yaml_file_is_overridden_by_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "staging.yaml"
    config_file.write_text(
        "# staging\n"
        "serpapi_key: \"yaml-serp\"\n"
        "rakuten_app_id: 'yaml-rakuten'\n"
        "request_timeout_seconds: 4.5\n"
        "catalog_store_backend: sqlite\n"
    )
    monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))
    monkeypatch.setenv("RAKUTEN_APP_ID", "env-rakuten")

    config = ClosetConfig.from_env()

    assert config.serpapi_key == "yaml-serp"
    assert config.rakuten_app_id == "env-rakuten"
    assert config.request_timeout_seconds == 4.5
    assert config.catalog_store_backend == "sqlite"
    assert config.configured_services() == {"gemini": False, "serpapi": True, "rakuten": True}


def test_invalid_timeout_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "soon")
    assert ClosetConfig.from_env().request_timeout_seconds == 10.0


def test_redact_for_log_masks_credentials_and_images() -> None:
    scrubbed = redact_for_log(
        {
            "api_key": "secret",
            "image": "AAAA",
            "url": "https://serpapi.com/search?api_key=secret&q=shirt",
            "contact": "someone@example.com",
            "query": "white shirt",
            "nested": [{"applicationId": "123"}],
        }
    )
    assert scrubbed["api_key"] == "[redacted]"
    assert scrubbed["image"] == "[redacted]"
    assert scrubbed["url"] == "[redacted-url]"
    assert scrubbed["contact"] == "[redacted-email]"
    assert scrubbed["query"] == "white shirt"
    assert scrubbed["nested"] == [{"applicationId": "[redacted]"}]


def test_json_formatter_includes_correlation_and_extra_fields() -> None:
    logger = logging.getLogger("tests.json")
    record = logger.makeRecord(
        "tests.json",
        logging.INFO,
        __file__,
        1,
        "product_search_completed",
        (),
        None,
        extra={"event": "product_search_completed", "returned": 3},
    )
    with correlation_context("corr-123"):
        payload = json.loads(JsonFormatter().format(record))

    assert payload["correlation_id"] == "corr-123"
    assert payload["event"] == "product_search_completed"
    assert payload["returned"] == 3


def test_log_event_attaches_correlation_id(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.events")
    with caplog.at_level(logging.INFO, logger="tests.events"):
        with correlation_context("abc"):
            log_event(logger, logging.INFO, "something_happened", source="rakuten")

    record = caplog.records[-1]
    assert record.event == "something_happened"
    assert record.correlation_id == "abc"
    assert record.source == "rakuten"
    assert CORRELATION_ID.get() != "abc"
