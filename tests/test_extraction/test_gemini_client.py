"""
Tests for the Gemini extraction client.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from dental_voice_chart.errors import (
    ExtractionContractError,
    ExtractionError,
    ServiceUnavailableError,
)
from dental_voice_chart.extraction.chart_types import ActionOperation, StatusOperation
from dental_voice_chart.extraction.gemini_client import GeminiClient, GeminiClientConfig
from dental_voice_chart.extraction.prompts import load_prompt

POST = "dental_voice_chart.extraction.gemini_client.requests.post"


class TestGeminiClientConfig:
    """Tests for Gemini client configuration."""

    def test_default_config(self):
        """Test default configuration values."""
        config = GeminiClientConfig()

        assert config.api_key is None
        assert config.model_id == "gemini-1.5-flash"
        assert config.prompt_version == "v1"
        assert config.timeout_seconds == 30.0

    def test_config_from_env(self, monkeypatch):
        """Test configuration from environment variables."""
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("GEMINI_MODEL_ID", "gemini-1.5-pro")

        config = GeminiClientConfig.from_env()

        assert config.api_key == "env-key"
        assert config.model_id == "gemini-1.5-pro"


class TestGeminiClient:
    """Tests for GeminiClient."""

    @pytest.fixture
    def client(self) -> GeminiClient:
        """Create Gemini client for testing."""
        return GeminiClient(GeminiClientConfig(api_key="test-key"))

    def test_requires_api_key(self, monkeypatch):
        """Test a missing key is rejected up front."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            GeminiClient(GeminiClientConfig())

    @patch(POST)
    def test_request_format(
        self, mock_post: MagicMock, client: GeminiClient, mock_response, gemini_reply
    ):
        """Test endpoint, key and payload."""
        mock_post.return_value = mock_response(json_data=gemini_reply("[]"))

        client.extract("301번 피디 투")

        call = mock_post.call_args
        assert call.args[0].endswith("/models/gemini-1.5-flash:generateContent")
        assert call.kwargs["params"] == {"key": "test-key"}
        assert call.kwargs["timeout"] == 30.0
        parts = call.kwargs["json"]["contents"][0]["parts"]
        assert parts[0]["text"] == load_prompt("v1")
        assert parts[1]["text"] == "301번 피디 투"
        assert call.kwargs["json"]["generationConfig"]["temperature"] == 0.1

    @patch(POST)
    def test_extract_status(
        self, mock_post: MagicMock, client: GeminiClient, mock_response, gemini_reply
    ):
        """Test a status command."""
        reply = '{"results": [{"toothId": "301", "type": "status", "actionId": "PD", "value": "2"}]}'
        mock_post.return_value = mock_response(json_data=gemini_reply(reply))

        result = client.extract("301번 피디 투")

        assert result.operations == [StatusOperation("301", "PD", "2")]

    @patch(POST)
    def test_extract_fenced_reply(
        self, mock_post: MagicMock, client: GeminiClient, mock_response, gemini_reply,
        extraction_example_transcript: str, extraction_example_response: str,
    ):
        """Test a code-fenced reply with memo."""
        mock_post.return_value = mock_response(
            json_data=gemini_reply(extraction_example_response)
        )

        result = client.extract(extraction_example_transcript)

        assert result.operations == [ActionOperation("104", "EXT"), ActionOperation("all", "SC")]
        assert result.memo == "잇몸 색깔이 이상함"

    @patch(POST)
    def test_reply_split_across_parts(
        self, mock_post: MagicMock, client: GeminiClient, mock_response
    ):
        """Test multi-part replies are concatenated."""
        body = {"candidates": [{"content": {"parts": [{"text": '{"memo": '}, {"text": '"메모"}'}]}}]}
        mock_post.return_value = mock_response(json_data=body)

        assert client.extract("메모 메모").memo == "메모"

    @patch(POST)
    def test_blank_transcript_skips_request(self, mock_post: MagicMock, client: GeminiClient):
        """Test blank input is a no-op without a network call."""
        assert client.extract("   ").is_empty
        mock_post.assert_not_called()

    @patch(POST)
    def test_malformed_reply(
        self, mock_post: MagicMock, client: GeminiClient, mock_response, gemini_reply
    ):
        """Test contract violations carry the raw reply."""
        mock_post.return_value = mock_response(json_data=gemini_reply("104번 발치입니다"))

        with pytest.raises(ExtractionContractError) as exc_info:
            client.extract("104번 발치")

        assert exc_info.value.raw_response == "104번 발치입니다"

    @patch(POST)
    def test_no_candidates(self, mock_post: MagicMock, client: GeminiClient, mock_response):
        """Test a blocked or empty answer is a contract violation."""
        mock_post.return_value = mock_response(json_data={"candidates": []})

        with pytest.raises(ExtractionContractError):
            client.extract("104번 발치")

    @patch(POST)
    def test_http_error(self, mock_post: MagicMock, client: GeminiClient, mock_response):
        """Test API error status raises ExtractionError."""
        mock_post.return_value = mock_response(status_code=429, text="quota exceeded")

        with pytest.raises(ExtractionError, match="429") as exc_info:
            client.extract("104번 발치")

        assert not isinstance(exc_info.value, ExtractionContractError)

    @patch(POST)
    def test_timeout(self, mock_post: MagicMock, client: GeminiClient):
        """Test timeouts raise ServiceUnavailableError."""
        mock_post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(ServiceUnavailableError) as exc_info:
            client.extract("104번 발치")

        assert exc_info.value.service == "extraction"

    @patch("dental_voice_chart.extraction.gemini_client.requests.get")
    def test_health_check(self, mock_get: MagicMock, client: GeminiClient, mock_response):
        """Test health check reflects the model endpoint status."""
        mock_get.return_value = mock_response(status_code=200)
        assert client.health_check() is True

        mock_get.side_effect = requests.ConnectionError("down")
        assert client.health_check() is False
