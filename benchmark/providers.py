"""
Provider clients - Send verification prompts to LLM providers.

Supported provider types:
- publicai / openai: chat completions over HTTP (requests)
- claude: Anthropic SDK, initialized lazily
- gemini: generateContent over HTTP (requests)

A failed call never raises into the benchmark loop; it comes back as a
ProviderResponse with verdict ERROR, the error message and the latency.
"""

import os
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from pydantic import BaseModel

from core.config import settings
from core.logging import get_logger
from evals.response_parser import parse_verdict_response
from evals.verdicts import Verdict


logger = get_logger(__name__)

PUBLICAI_ENDPOINT = "https://api.publicai.co/v1/chat/completions"


class ProviderType(str, Enum):
    """Wire protocol used to call a provider."""
    PUBLICAI = "publicai"
    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"


class ProviderError(RuntimeError):
    """Provider call failed (missing key, HTTP error, malformed body)."""


class ProviderConfig(BaseModel):
    """A provider/model pair to benchmark."""

    key: str
    name: str
    model: str
    endpoint: str
    type: ProviderType
    key_env: str
    requires_key: bool = True

    @property
    def api_key(self) -> Optional[str]:
        return os.environ.get(self.key_env)

    @property
    def is_available(self) -> bool:
        """True when no key is needed or the key is set."""
        return not self.requires_key or bool(self.api_key)


# Open models served through PublicAI; benchmarked unless --providers says otherwise
DEFAULT_PROVIDERS: Dict[str, ProviderConfig] = {
    "apertus-70b": ProviderConfig(
        key="apertus-70b",
        name="Apertus 70B",
        model="swiss-ai/apertus-70b-instruct",
        endpoint=PUBLICAI_ENDPOINT,
        type=ProviderType.PUBLICAI,
        key_env="PUBLICAI_API_KEY",
    ),
    "qwen-sealion": ProviderConfig(
        key="qwen-sealion",
        name="Qwen SEA-LION v4",
        model="aisingapore/Qwen-SEA-LION-v4-32B-IT",
        endpoint=PUBLICAI_ENDPOINT,
        type=ProviderType.PUBLICAI,
        key_env="PUBLICAI_API_KEY",
    ),
    "olmo-32b": ProviderConfig(
        key="olmo-32b",
        name="OLMo 3.1 32B",
        model="allenai/Olmo-3.1-32B-Instruct",
        endpoint=PUBLICAI_ENDPOINT,
        type=ProviderType.PUBLICAI,
        key_env="PUBLICAI_API_KEY",
    ),
}

# Commercial providers, selectable by key
OPTIONAL_PROVIDERS: Dict[str, ProviderConfig] = {
    "claude": ProviderConfig(
        key="claude",
        name="Claude Sonnet",
        model="claude-sonnet-4-20250514",
        endpoint="https://api.anthropic.com/v1/messages",
        type=ProviderType.CLAUDE,
        key_env="ANTHROPIC_API_KEY",
    ),
    "openai": ProviderConfig(
        key="openai",
        name="GPT-4o",
        model="gpt-4o",
        endpoint="https://api.openai.com/v1/chat/completions",
        type=ProviderType.OPENAI,
        key_env="OPENAI_API_KEY",
    ),
    "gemini": ProviderConfig(
        key="gemini",
        name="Gemini 1.5 Flash",
        model="gemini-1.5-flash",
        endpoint="https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent",
        type=ProviderType.GEMINI,
        key_env="GEMINI_API_KEY",
    ),
}

PROVIDERS: Dict[str, ProviderConfig] = {**DEFAULT_PROVIDERS, **OPTIONAL_PROVIDERS}


class ProviderResponse(BaseModel):
    """Outcome of one verification call."""

    verdict: Verdict
    confidence: float = 0.0
    comments: str = ""
    raw_response: str = ""
    latency_ms: float = 0.0
    error: Optional[str] = None


class ProviderClient:
    """Calls a single provider with a system and user prompt."""

    def __init__(
        self,
        config: ProviderConfig,
        session: Optional[requests.Session] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[int] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the client.

        Args:
            config: Provider configuration
            session: requests session for HTTP providers
            api_key: API key (defaults to the config's environment variable)
            timeout_s: Request timeout
            max_tokens: Response token limit
            temperature: Sampling temperature
            clock: Monotonic clock in seconds, injectable for tests
        """
        self.config = config
        self.session = session or requests.Session()
        self.api_key = api_key or config.api_key
        self.timeout_s = timeout_s or settings.provider_timeout_s
        self.max_tokens = max_tokens or settings.provider_max_tokens
        self.temperature = settings.provider_temperature if temperature is None else temperature
        self._clock = clock
        self._client = None

    def _get_client(self):
        """Lazily initialize the Anthropic client."""
        if self._client is None:
            try:
                import anthropic
                self._client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout_s)
            except ImportError:
                raise ImportError(
                    "anthropic package required. Install with: pip install anthropic"
                )
        return self._client

    def verify(self, system_prompt: str, user_prompt: str) -> ProviderResponse:
        """
        Ask the provider for a verdict.

        Args:
            system_prompt: Verification instructions
            user_prompt: Claim and source

        Returns:
            ProviderResponse; verdict is ERROR when the call failed
        """
        start = self._clock()
        try:
            content = self._complete(system_prompt, user_prompt)
        except Exception as e:
            latency_ms = (self._clock() - start) * 1000
            logger.provider_call_failed(self.config.key, str(e), latency_ms)
            return ProviderResponse(
                verdict=Verdict.ERROR,
                comments=str(e),
                latency_ms=latency_ms,
                error=str(e),
            )

        latency_ms = (self._clock() - start) * 1000
        parsed = parse_verdict_response(content)
        logger.provider_call_completed(self.config.key, parsed.verdict.value, latency_ms)

        return ProviderResponse(
            verdict=parsed.verdict,
            confidence=parsed.confidence,
            comments=parsed.comments,
            raw_response=parsed.raw_response,
            latency_ms=latency_ms,
        )

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """Raw response text from the provider."""
        if self.config.requires_key and not self.api_key:
            raise ProviderError(f"Missing {self.config.key_env}")

        if self.config.type in (ProviderType.PUBLICAI, ProviderType.OPENAI):
            return self._call_chat_completions(system_prompt, user_prompt)
        elif self.config.type == ProviderType.CLAUDE:
            return self._call_claude(system_prompt, user_prompt)
        elif self.config.type == ProviderType.GEMINI:
            return self._call_gemini(system_prompt, user_prompt)
        else:
            raise ProviderError(f"Unknown provider type: {self.config.type}")

    def _post_json(self, url: str, body: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        response = self.session.post(
            url,
            json=body,
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=self.timeout_s,
        )
        if response.status_code >= 400:
            raise ProviderError(f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"Parse error: {e}")

    def _call_chat_completions(self, system_prompt: str, user_prompt: str) -> str:
        data = self._post_json(
            self.config.endpoint,
            {
                "model": self.config.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        choices = data.get("choices") or [{}]
        return (choices[0].get("message") or {}).get("content") or ""

    def _call_claude(self, system_prompt: str, user_prompt: str) -> str:
        client = self._get_client()
        response = client.messages.create(
            model=self.config.model,
            max_tokens=self.max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        if not response.content:
            return ""
        return response.content[0].text

    def _call_gemini(self, system_prompt: str, user_prompt: str) -> str:
        data = self._post_json(
            f"{self.config.endpoint}?key={self.api_key}",
            {
                "contents": [{"parts": [{"text": f"{system_prompt}\n\n{user_prompt}"}]}],
                "generationConfig": {
                    "temperature": self.temperature,
                    "maxOutputTokens": self.max_tokens,
                },
            },
        )
        candidates = data.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or [{}]
        return parts[0].get("text") or ""


def select_providers(
    keys: Optional[List[str]] = None,
    registry: Optional[Dict[str, ProviderConfig]] = None,
) -> Tuple[List[ProviderConfig], Dict[str, str]]:
    """
    Resolve provider keys to usable configs.

    Args:
        keys: Provider keys (defaults to DEFAULT_PROVIDERS)
        registry: Known providers (defaults to PROVIDERS)

    Returns:
        (available configs in the order given, {skipped key: reason})
    """
    registry = registry if registry is not None else PROVIDERS
    keys = keys or list(DEFAULT_PROVIDERS)

    available: List[ProviderConfig] = []
    skipped: Dict[str, str] = {}
    for key in keys:
        config = registry.get(key)
        if config is None:
            skipped[key] = "unknown provider"
        elif not config.is_available:
            skipped[key] = f"missing {config.key_env}"
        else:
            available.append(config)

    return available, skipped
