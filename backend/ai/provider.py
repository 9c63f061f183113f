# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
OpenRouter client – chat completions and the model list.

Every failure (transport error, timeout, non-2xx answer, unreadable JSON)
is raised as :class:`UpstreamError`.  Nothing is retried.
"""

from typing import Any, Dict, List, Optional

import httpx

from core.config import settings
from core.errors import UpstreamError
from core.logger import logger

# Outbound calls to the provider give up after this many seconds
PROVIDER_TIMEOUT = 120.0

_USER_AGENT = "canvas-ide-backend/0.1.0"
_REFERER = "https://canvas-ide.app"
_TITLE = "Infinite Canvas IDE"


def build_messages(prompt: str, system_prompt: Optional[str] = None) -> List[Dict[str, str]]:
    """Optional system message first, then the user prompt."""
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


def _error_message(response: httpx.Response) -> str:
    """Best effort ``error.message`` from the provider's JSON body."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return "Unknown error"
    return message if isinstance(message, str) else "Unknown error"


class OpenRouterClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = PROVIDER_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": _USER_AGENT},
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def chat_completion(self, api_key: str, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        try:
            response = self._http.post(
                "/chat/completions",
                json={"model": model, "messages": messages},
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "HTTP-Referer": _REFERER,
                    "X-Title": _TITLE,
                },
            )
        except httpx.HTTPError as exc:
            logger.warning("OpenRouter completion request failed: %s", exc)
            raise UpstreamError(f"Request failed: {exc}")

        if not response.is_success:
            message = _error_message(response)
            logger.warning("OpenRouter completion error %d: %s", response.status_code, message)
            raise UpstreamError(
                f"OpenRouter error {response.status_code}: {message}",
                provider_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Parse error: {exc}", provider_status=response.status_code)
        if not isinstance(data, dict):
            raise UpstreamError("Parse error: unexpected response body", provider_status=response.status_code)
        return data

    def list_models(self) -> List[dict]:
        try:
            response = self._http.get("/models")
        except httpx.HTTPError as exc:
            logger.warning("OpenRouter model list request failed: %s", exc)
            raise UpstreamError(f"Failed to fetch models: {exc}")

        if not response.is_success:
            raise UpstreamError(
                f"Failed to fetch models: {response.status_code} {_error_message(response)}",
                provider_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Failed to parse models: {exc}", provider_status=response.status_code)

        models = data.get("data") if isinstance(data, dict) else None
        return models if isinstance(models, list) else []


def parse_completion(data: Dict[str, Any], requested_model: str) -> Dict[str, Any]:
    """
    Pull content, model and usage out of a completion body.  Missing
    content becomes "", a missing model falls back to *requested_model*.
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    model = data.get("model")
    return {
        "content": content if isinstance(content, str) else "",
        "model": model if isinstance(model, str) and model else requested_model,
        "usage": data.get("usage"),
    }


# Shared connection pool for the process
provider_client = OpenRouterClient(settings.openrouter_base_url)


def get_provider() -> OpenRouterClient:
    """FastAPI dependency."""
    return provider_client
