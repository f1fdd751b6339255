"""Unit tests for core infrastructure components."""

import json
import logging
import pytest
from unittest.mock import patch, MagicMock


def test_default_config_loads(monkeypatch):
    """Test the bundled config/pipeline.yaml is valid"""
    from sms_pipeline.utils.config_loader import load_config

    monkeypatch.delenv("PIPELINE_CONFIG", raising=False)
    config = load_config()

    assert config["version"]
    assert config["extraction"]["order"] == ["cloud", "pattern"]
    assert config["auto_tagger"]["threshold"] == 100
    assert len(config["accounts"]) >= 1


def test_config_from_env_path(tmp_path, monkeypatch):
    from sms_pipeline.utils.config_loader import load_config

    config_file = tmp_path / "custom.yaml"
    config_file.write_text(
        "version: '2'\npreprocessor: {}\nextraction: {}\nauto_tagger: {}\naccounts: []\n"
    )
    monkeypatch.setenv("PIPELINE_CONFIG", str(config_file))

    assert load_config()["version"] == "2"


def test_config_missing_keys(tmp_path):
    from sms_pipeline.utils.config_loader import load_config
    from sms_pipeline.utils.errors import ConfigurationError

    config_file = tmp_path / "partial.yaml"
    config_file.write_text("version: '1'\n")

    with pytest.raises(ConfigurationError, match="Missing required"):
        load_config(str(config_file))


def test_config_invalid_yaml(tmp_path):
    from sms_pipeline.utils.config_loader import load_config
    from sms_pipeline.utils.errors import ConfigurationError

    config_file = tmp_path / "broken.yaml"
    config_file.write_text("version: [unclosed\n")

    with pytest.raises(ConfigurationError):
        load_config(str(config_file))


def test_config_missing_file(tmp_path):
    from sms_pipeline.utils.config_loader import load_config
    from sms_pipeline.utils.errors import ConfigurationError

    with pytest.raises(ConfigurationError, match="not found"):
        load_config(str(tmp_path / "missing.yaml"))


def test_get_section():
    from sms_pipeline.utils.config_loader import get_section

    config = {"extraction": {"cloud": {"enabled": False}, "order": ["pattern"]}}
    assert get_section(config, "extraction", "cloud") == {"enabled": False}
    assert get_section(config, "extraction", "order") == {}
    assert get_section(config, "missing", "deeper") == {}


def test_structured_logger_emits_json(caplog):
    """Test keyword fields end up in the JSON log line"""
    from sms_pipeline.utils.logging import get_logger

    logger = get_logger("test.structured")
    with caplog.at_level(logging.INFO, logger="test.structured"):
        logger.info("Transaction saved", transaction_id="txn-1", amount=500)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["message"] == "Transaction saved"
    assert payload["transaction_id"] == "txn-1"
    assert payload["level"] == "INFO"


def test_structured_logger_respects_level(monkeypatch, caplog):
    from sms_pipeline.utils.logging import get_logger

    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    logger = get_logger("test.level")
    with caplog.at_level(logging.WARNING, logger="test.level"):
        logger.info("hidden")
        logger.warning("shown")

    messages = [json.loads(r.getMessage())["message"] for r in caplog.records if r.name == "test.level"]
    assert messages == ["shown"]


def test_llm_cost_calculation():
    """Test LLM cost calculation."""
    from sms_pipeline.tools.llm_client import calculate_cost

    assert calculate_cost(1_000_000, "openai/gpt-4o-mini") == pytest.approx(0.15)
    assert calculate_cost(1_000_000, "google/gemini-2.0-flash-001") == pytest.approx(0.10)
    # Unknown models use the default price
    assert calculate_cost(1000, "some/unknown-model") == pytest.approx(0.00015)


def test_llm_client_without_api_key(monkeypatch):
    """Test LLM client creation fails cleanly when the API key is missing."""
    from sms_pipeline.tools.llm_client import create_client
    from sms_pipeline.utils.errors import LLMError

    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    with pytest.raises(LLMError):
        create_client()


def _llm_response(content, tokens=120):
    response = MagicMock()
    response.usage.total_tokens = tokens
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


def test_call_llm_returns_content():
    from sms_pipeline.tools.llm_client import call_llm

    client = MagicMock()
    client.chat.completions.create.return_value = _llm_response('{"isTransaction": false}')

    result = call_llm(client, "prompt", model="openai/gpt-4o-mini", timeout=5)

    assert result == '{"isTransaction": false}'
    kwargs = client.chat.completions.create.call_args[1]
    assert kwargs["model"] == "openai/gpt-4o-mini"
    assert kwargs["timeout"] == 5
    assert kwargs["temperature"] == 0


def test_call_llm_retries_rate_limit():
    from sms_pipeline.tools.llm_client import call_llm

    client = MagicMock()
    client.chat.completions.create.side_effect = [Exception("Error 429: rate_limit"), _llm_response("ok")]

    with patch("sms_pipeline.tools.llm_client.time.sleep") as mock_sleep:
        assert call_llm(client, "prompt", max_retries=2) == "ok"
    mock_sleep.assert_called_once_with(1)


def test_call_llm_raises_after_failures():
    from sms_pipeline.tools.llm_client import call_llm
    from sms_pipeline.utils.errors import LLMError

    client = MagicMock()
    client.chat.completions.create.side_effect = Exception("connection reset")

    with pytest.raises(LLMError):
        call_llm(client, "prompt", max_retries=1)


def test_retry_handler():
    """Test retry logic with exponential backoff"""
    from sms_pipeline.pipeline.retry_handler import retry_with_exponential_backoff
    from sms_pipeline.utils.errors import RetryableProcessingError

    attempts = []

    def flaky_func():
        attempts.append(1)
        if len(attempts) < 3:
            raise RetryableProcessingError("Test failure")
        return "success"

    result = retry_with_exponential_backoff(flaky_func, max_retries=5, base_delay=0)
    assert result == "success"
    assert len(attempts) == 3


def test_retry_handler_exhaustion():
    """Test that retry handler raises error after max attempts"""
    from sms_pipeline.pipeline.retry_handler import retry_with_exponential_backoff
    from sms_pipeline.utils.errors import PipelineError, RetryableProcessingError

    def always_fail():
        raise RetryableProcessingError("Always fails")

    with pytest.raises(PipelineError, match="Failed after 3 attempts"):
        retry_with_exponential_backoff(always_fail, max_retries=3, base_delay=0)


def test_retry_handler_does_not_retry_other_errors():
    from sms_pipeline.pipeline.retry_handler import retry_with_exponential_backoff

    attempts = []

    def broken():
        attempts.append(1)
        raise ValueError("bug")

    with pytest.raises(ValueError):
        retry_with_exponential_backoff(broken, max_retries=3, base_delay=0)
    assert len(attempts) == 1


def test_error_hierarchy():
    from sms_pipeline.utils.errors import (
        PipelineError,
        StoreError,
        DuplicateTransactionError,
        RetryableProcessingError
    )

    assert issubclass(DuplicateTransactionError, StoreError)
    assert issubclass(StoreError, PipelineError)
    assert issubclass(RetryableProcessingError, PipelineError)
