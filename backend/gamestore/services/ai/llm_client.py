"""
LLM Client

Single entry point for text generation across providers:
- claude: Anthropic SDK
- openai / perplexity: chat completions over httpx
- local: OpenAI-compatible server at LOCAL_LLM_URL (no key)

Transport and API errors are returned in LLMResponse.error instead of being
raised; only a missing API key raises LLMConfigError.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import anthropic
import httpx

from gamestore.core.config import settings

logger = logging.getLogger(__name__)

# ============================================================================
# CONFIGURATION
# ============================================================================

PROVIDERS = ['claude', 'openai', 'perplexity', 'local']

DEFAULT_MODELS = {
    'claude': 'claude-haiku-4-5-20251001',
    'openai': 'gpt-4o-mini',
    'perplexity': 'sonar',
    'local': 'llama3',
}

CHAT_COMPLETION_URLS = {
    'openai': 'https://api.openai.com/v1/chat/completions',
    'perplexity': 'https://api.perplexity.ai/chat/completions',
}


class LLMConfigError(ValueError):
    """Provider unknown or its API key not configured"""


@dataclass
class LLMResponse:
    content: str
    provider: str
    model: str
    tokens_used: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.content.strip())


class LLMClient:

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.provider = provider or settings.AI_PROVIDER
        if self.provider not in PROVIDERS:
            raise LLMConfigError(f"Unknown provider '{self.provider}'. Use one of: {', '.join(PROVIDERS)}")

        # AI_MODEL names a model of AI_PROVIDER; other providers use their own default
        configured = settings.AI_MODEL if self.provider == settings.AI_PROVIDER else None
        self.model = model or configured or DEFAULT_MODELS[self.provider]
        self.api_key = api_key if api_key is not None else self._key_from_settings()
        self.temperature = settings.AI_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.AI_MAX_TOKENS
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS

        if self.provider != 'local' and not self.api_key:
            raise LLMConfigError(f"No API key configured for provider '{self.provider}'")

    def _key_from_settings(self) -> str:
        return {
            'claude': settings.ANTHROPIC_API_KEY,
            'openai': settings.OPENAI_API_KEY,
            'perplexity': settings.PERPLEXITY_API_KEY,
            'local': '',
        }[self.provider]

    async def complete(self, prompt: str) -> LLMResponse:
        logger.info(f"Calling {self.provider} with model {self.model}")
        if self.provider == 'claude':
            return await self._call_claude(prompt)
        if self.provider == 'local':
            return await self._call_chat_completions(settings.LOCAL_LLM_URL, prompt)
        return await self._call_chat_completions(CHAT_COMPLETION_URLS[self.provider], prompt)

    async def _call_claude(self, prompt: str) -> LLMResponse:
        try:
            client = anthropic.AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
            message = await client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}]
            )
            text = "".join(block.text for block in message.content if block.type == "text")
            return LLMResponse(
                content=text,
                provider='claude',
                model=self.model,
                tokens_used=message.usage.input_tokens + message.usage.output_tokens
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            return LLMResponse(content='', provider='claude', model=self.model, error=str(e))

    async def _call_chat_completions(self, url: str, prompt: str) -> LLMResponse:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, headers=headers, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"{self.provider} HTTP error {e.response.status_code}: {e.response.text[:200]}")
            return LLMResponse(
                content='', provider=self.provider, model=self.model,
                error=f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            )
        except httpx.HTTPError as e:
            logger.error(f"{self.provider} request failed: {e}")
            return LLMResponse(content='', provider=self.provider, model=self.model, error=str(e))
        except ValueError as e:
            logger.error(f"{self.provider} returned a non-JSON body: {e}")
            return LLMResponse(
                content='', provider=self.provider, model=self.model,
                error=f"Invalid JSON response: {e}"
            )

        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ''
        return LLMResponse(
            content=content,
            provider=self.provider,
            model=self.model,
            tokens_used=(data.get("usage") or {}).get("total_tokens")
        )


def get_llm_client(provider: Optional[str] = None, model: Optional[str] = None) -> LLMClient:
    """New client per call so provider/model overrides never leak between requests"""
    return LLMClient(provider=provider, model=model)
