"""
Tests for provider clients and prompt construction.
"""

from unittest.mock import MagicMock, Mock

import pytest
import requests

from benchmark.prompts import SYSTEM_PROMPT, build_user_prompt
from benchmark.providers import (
    DEFAULT_PROVIDERS,
    PROVIDERS,
    ProviderClient,
    ProviderConfig,
    ProviderType,
    select_providers,
)
from evals.verdicts import Verdict


GOOD_CONTENT = '{"confidence": 90, "verdict": "SUPPORTED", "comments": "Stated directly"}'


def json_response(payload, status_code=200):
    resp = Mock(status_code=status_code, text=str(payload))
    resp.json.return_value = payload
    return resp


def ticking_clock(step=0.25):
    """Clock advancing by step seconds per call."""
    ticks = iter(i * step for i in range(1000))
    return lambda: next(ticks)


def config(provider_type=ProviderType.PUBLICAI, key_env="TEST_PROVIDER_KEY"):
    return ProviderConfig(
        key="test-model",
        name="Test Model",
        model="org/test-model",
        endpoint="https://api.example.com/v1/chat/completions",
        type=provider_type,
        key_env=key_env,
    )


class TestPrompts:
    """Tests for prompt construction."""

    def test_user_prompt_includes_claim_and_source(self):
        prompt = build_user_prompt("The bridge opened in 1932.", "Opened to traffic in 1932.", "https://x.org/a")

        assert "CLAIM FROM WIKIPEDIA:\nThe bridge opened in 1932." in prompt
        assert "Source URL: https://x.org/a\n\nSource Content:\nOpened to traffic in 1932." in prompt
        assert prompt.endswith("Provide your analysis in JSON format.")

    def test_user_prompt_without_url(self):
        prompt = build_user_prompt("Claim.", "Source body")

        assert "SOURCE:\nSource body\n" in prompt
        assert "Source URL" not in prompt

    def test_source_truncated(self):
        prompt = build_user_prompt("Claim.", "abcdefghij", max_source_chars=4)

        assert "abcd\n" in prompt
        assert "abcde" not in prompt

    def test_system_prompt_lists_verdicts(self):
        assert "PARTIALLY SUPPORTED" in SYSTEM_PROMPT
        assert "SOURCE UNAVAILABLE" in SYSTEM_PROMPT


class TestProviderRegistry:
    """Tests for provider configuration and selection."""

    def test_default_providers(self):
        assert list(DEFAULT_PROVIDERS) == ["apertus-70b", "qwen-sealion", "olmo-32b"]
        assert all(p.type == ProviderType.PUBLICAI for p in DEFAULT_PROVIDERS.values())

    def test_select_skips_missing_keys(self, monkeypatch):
        monkeypatch.delenv("PUBLICAI_API_KEY", raising=False)

        available, skipped = select_providers()

        assert available == []
        assert skipped["olmo-32b"] == "missing PUBLICAI_API_KEY"

    def test_select_available_in_order(self, monkeypatch):
        monkeypatch.setenv("PUBLICAI_API_KEY", "secret")

        available, skipped = select_providers(["olmo-32b", "apertus-70b", "nope"])

        assert [p.key for p in available] == ["olmo-32b", "apertus-70b"]
        assert skipped == {"nope": "unknown provider"}

    def test_optional_providers_registered(self):
        assert PROVIDERS["claude"].type == ProviderType.CLAUDE
        assert PROVIDERS["gemini"].type == ProviderType.GEMINI


class TestProviderClient:
    """Tests for ProviderClient.verify."""

    def test_chat_completions_call(self):
        session = Mock()
        session.post.return_value = json_response({"choices": [{"message": {"content": GOOD_CONTENT}}]})
        client = ProviderClient(config(), session=session, api_key="secret", clock=ticking_clock())

        result = client.verify("system", "user")

        assert result.verdict == Verdict.SUPPORTED
        assert result.confidence == 90.0
        assert result.error is None
        assert result.latency_ms == pytest.approx(250.0)

        _, kwargs = session.post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["json"]["messages"][0] == {"role": "system", "content": "system"}
        assert kwargs["json"]["model"] == "org/test-model"

    def test_missing_key_is_error_response(self, monkeypatch):
        monkeypatch.delenv("TEST_PROVIDER_KEY", raising=False)
        session = Mock()

        result = ProviderClient(config(), session=session).verify("system", "user")

        assert result.verdict == Verdict.ERROR
        assert result.error == "Missing TEST_PROVIDER_KEY"
        session.post.assert_not_called()

    def test_http_error_is_error_response(self):
        session = Mock()
        session.post.return_value = json_response({"error": "rate limited"}, status_code=429)

        result = ProviderClient(config(), session=session, api_key="secret", clock=ticking_clock()).verify("s", "u")

        assert result.verdict == Verdict.ERROR
        assert result.error.startswith("HTTP 429")
        assert result.latency_ms > 0

    def test_timeout_is_error_response(self):
        session = Mock()
        session.post.side_effect = requests.Timeout("Request timeout")

        result = ProviderClient(config(), session=session, api_key="secret").verify("s", "u")

        assert result.verdict == Verdict.ERROR
        assert "timeout" in result.error.lower()

    def test_unparseable_content(self):
        session = Mock()
        session.post.return_value = json_response({"choices": [{"message": {"content": "No idea."}}]})

        result = ProviderClient(config(), session=session, api_key="secret").verify("s", "u")

        assert result.verdict == Verdict.ERROR
        assert result.error is None

    def test_gemini_call(self):
        session = Mock()
        session.post.return_value = json_response(
            {"candidates": [{"content": {"parts": [{"text": GOOD_CONTENT}]}}]}
        )
        client = ProviderClient(config(ProviderType.GEMINI), session=session, api_key="gkey")

        result = client.verify("system", "user")

        assert result.verdict == Verdict.SUPPORTED
        url = session.post.call_args.args[0]
        assert url.endswith("?key=gkey")
        body = session.post.call_args.kwargs["json"]
        assert body["contents"][0]["parts"][0]["text"] == "system\n\nuser"
        assert body["generationConfig"]["maxOutputTokens"] == client.max_tokens

    def test_claude_call(self):
        anthropic_client = MagicMock()
        anthropic_client.messages.create.return_value = Mock(content=[Mock(text=GOOD_CONTENT)])
        client = ProviderClient(config(ProviderType.CLAUDE), api_key="akey")
        client._client = anthropic_client

        result = client.verify("system", "user")

        assert result.verdict == Verdict.SUPPORTED
        kwargs = anthropic_client.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["messages"] == [{"role": "user", "content": "user"}]
