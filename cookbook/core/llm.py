"""
LLM Integration
Handles communication with the configured LLM via OpenRouter API
"""

import logging

import httpx

from cookbook.config import (
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
    LLM_MODEL,
    LLM_TEMPERATURE,
    LLM_MAX_TOKENS,
    LLM_TIMEOUT
)
from cookbook.core.errors import UpstreamError, OverloadedError

logger = logging.getLogger(__name__)

# Statuses the provider uses to say "busy, try again shortly"
OVERLOADED_STATUSES = {503, 529}


def call_llm(
    prompt: str,
    model: str = LLM_MODEL,
    temperature: float = LLM_TEMPERATURE,
    max_tokens: int = LLM_MAX_TOKENS,
    timeout: int = LLM_TIMEOUT
) -> str:
    """
    Send one prompt to the configured LLM and return its raw text.

    Makes a single request. Retrying is left to the caller, which can tell
    an overload (OverloadedError) apart from other failures (UpstreamError).
    """
    if not OPENROUTER_API_KEY:
        raise UpstreamError(
            "OpenRouter API key not found. "
            "Please set OPENROUTER_API_KEY in your .env file."
        )

    headers = {
        "Authorization": f"Bearer {OPENROUTER_API_KEY}",
        "Content-Type": "application/json",
        "X-Title": "Cookbook"
    }

    payload = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": temperature,
        "max_tokens": max_tokens
    }

    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.post(
                OPENROUTER_BASE_URL,
                headers=headers,
                json=payload
            )
    except httpx.TimeoutException as e:
        raise UpstreamError(f"Request timed out after {timeout} seconds") from e
    except httpx.RequestError as e:
        raise UpstreamError(f"Network error: {str(e)}") from e

    if response.status_code in OVERLOADED_STATUSES:
        raise OverloadedError(
            f"Model is overloaded ({response.status_code})",
            status_code=response.status_code
        )

    if response.status_code != 200:
        error_detail = response.text
        try:
            error_json = response.json()
            if isinstance(error_json, dict) and isinstance(error_json.get("error"), dict):
                error_detail = error_json["error"].get("message", error_detail)
        except ValueError:
            pass
        raise UpstreamError(
            f"API error ({response.status_code}): {error_detail}",
            status_code=response.status_code
        )

    try:
        data = response.json()
    except ValueError as e:
        raise UpstreamError(
            f"Invalid API response: body is not JSON ({response.text[:200]!r})"
        ) from e

    if not isinstance(data, dict) or not isinstance(data.get("choices"), list) or len(data["choices"]) == 0:
        raise UpstreamError("Invalid API response: no choices returned")

    choice = data["choices"][0]
    message = choice.get("message") if isinstance(choice, dict) else None
    content = message.get("content") if isinstance(message, dict) else None

    if not isinstance(content, str):
        raise UpstreamError("Invalid API response: choice has no message content")

    if not content:
        raise UpstreamError("Empty response from API")

    logger.debug("LLM raw response: %s", content)
    return content
