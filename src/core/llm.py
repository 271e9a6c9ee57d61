"""
Agenda Assistant — LLM Provider Abstraction.

Single public function `complete()` that routes to the configured provider.
Provider is selected at startup via the LLM_PROVIDER env var.
Supports: gemini (default), anthropic, openai, cohere.

Provider failures are re-raised as LLMError; rejected credentials as
LLMAuthError, so callers can tell "try again later" from "fix your key".
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

# Low temperature: the assistant emits structured commands, not prose
_TEMPERATURE = 0.1

_AUTH_STATUSES = {401, 403}


class LLMError(Exception):
    """Raised when the LLM provider call fails (network, quota, server)."""


class LLMAuthError(LLMError):
    """Raised when the API key is missing, invalid or lacks permission."""


# Type alias for provider implementations
_ProviderFn = Callable[[str, str, str, str, int, bool], Awaitable[str]]

# ---------------------------------------------------------------------------
# Provider implementations
# ---------------------------------------------------------------------------


async def _complete_gemini(
    api_key: str, model: str, system: str, user_message: str, max_tokens: int, json_output: bool,
) -> str:
    import google.generativeai as genai

    genai.configure(api_key=api_key)
    gm = genai.GenerativeModel(
        model_name=model,
        system_instruction=system,
    )
    config_kwargs = {"max_output_tokens": max_tokens, "temperature": _TEMPERATURE}
    if json_output:
        config_kwargs["response_mime_type"] = "application/json"
    response = await gm.generate_content_async(
        user_message,
        generation_config=genai.types.GenerationConfig(**config_kwargs),
    )
    return response.text


async def _complete_anthropic(
    api_key: str, model: str, system: str, user_message: str, max_tokens: int, json_output: bool,
) -> str:
    import anthropic

    client = anthropic.AsyncAnthropic(api_key=api_key)
    response = await client.messages.create(
        model=model,
        max_tokens=max_tokens,
        temperature=_TEMPERATURE,
        system=system,
        messages=[{"role": "user", "content": user_message}],
    )
    return response.content[0].text


async def _complete_openai(
    api_key: str, model: str, system: str, user_message: str, max_tokens: int, json_output: bool,
) -> str:
    from openai import AsyncOpenAI

    client = AsyncOpenAI(api_key=api_key)
    extra = {"response_format": {"type": "json_object"}} if json_output else {}
    response = await client.chat.completions.create(
        model=model,
        max_tokens=max_tokens,
        temperature=_TEMPERATURE,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": user_message},
        ],
        **extra,
    )
    return response.choices[0].message.content


async def _complete_cohere(
    api_key: str, model: str, system: str, user_message: str, max_tokens: int, json_output: bool,
) -> str:
    import cohere

    client = cohere.AsyncClientV2(api_key=api_key)
    extra = {"response_format": {"type": "json_object"}} if json_output else {}
    response = await client.chat(
        model=model,
        max_tokens=max_tokens,
        temperature=_TEMPERATURE,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": user_message},
        ],
        **extra,
    )
    return response.message.content[0].text


# ---------------------------------------------------------------------------
# Provider selection (runs once at first call)
# ---------------------------------------------------------------------------

_PROVIDERS: dict[str, tuple[_ProviderFn, str]] = {
    "gemini":    (_complete_gemini,    "gemini-2.0-flash"),
    "anthropic": (_complete_anthropic, "claude-haiku-4-5-20251001"),
    "openai":    (_complete_openai,    "gpt-4o-mini"),
    "cohere":    (_complete_cohere,    "command-a-03-2025"),
}


def _select_provider() -> tuple[_ProviderFn, str, str]:
    """Read settings and return (provider_fn, model, api_key)."""
    from src.config import settings

    provider_name = settings.LLM_PROVIDER.lower()
    if provider_name not in _PROVIDERS:
        raise ValueError(
            f"Unknown LLM_PROVIDER={provider_name!r}. "
            f"Supported: {', '.join(_PROVIDERS)}"
        )

    fn, default_model = _PROVIDERS[provider_name]
    model = settings.LLM_MODEL or default_model
    api_key = settings.LLM_API_KEY

    logger.info("LLM provider: %s, model: %s", provider_name, model)
    return fn, model, api_key


def _status_of(exc: Exception) -> int | None:
    """HTTP status carried by a provider SDK exception, if any."""
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return None


# Lazy singleton — populated on first call to complete()
_provider_fn: _ProviderFn | None = None
_model: str = ""
_api_key: str = ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def complete(
    system: str, user_message: str, max_tokens: int = 256, json_output: bool = False,
) -> str:
    """Send a prompt to the configured LLM provider and return the response text.

    Args:
        json_output: Ask the provider for a JSON-only response where supported.

    Raises:
        LLMAuthError: Missing key, or the provider answered 401/403.
        LLMError: Any other provider failure.
    """
    global _provider_fn, _model, _api_key

    if _provider_fn is None:
        _provider_fn, _model, _api_key = _select_provider()

    if not _api_key:
        raise LLMAuthError("LLM_API_KEY is not set")

    try:
        return await _provider_fn(_api_key, _model, system, user_message, max_tokens, json_output)
    except Exception as exc:
        status = _status_of(exc)
        if status in _AUTH_STATUSES:
            logger.error("LLM provider rejected credentials (%s): %s", status, exc)
            raise LLMAuthError(f"The API key is invalid or lacks permission ({status})") from exc
        logger.error("LLM provider call failed: %s", exc)
        raise LLMError(str(exc)) from exc
