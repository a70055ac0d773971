"""Outgoing webhook provider.

Sends an HTTP request to an arbitrary URL via httpx. A credential is
optional; when present its ``headers`` are merged under the node's own
headers. Timeout and retries are provider-local settings.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from flowrun.providers.base import ProviderInput, skipped
from flowrun.utils.errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000
MAX_ATTEMPTS = 10


class WebhookCredential(BaseModel):
    headers: Optional[Dict[str, Any]] = None


def to_header_record(value: Any) -> Dict[str, str]:
    """Coerce a mapping into string headers, dropping empty keys and null values."""
    if not isinstance(value, dict):
        return {}
    headers: Dict[str, str] = {}
    for key, item in value.items():
        if not key or item is None:
            continue
        headers[str(key)] = item if isinstance(item, str) else json.dumps(item)
    return headers


def parse_body(response: httpx.Response) -> Any:
    """Parse a JSON response body, falling back to text."""
    content_type = response.headers.get("content-type", "")
    text = response.text
    if "application/json" in content_type:
        try:
            return json.loads(text) if text else None
        except (json.JSONDecodeError, ValueError):
            return text
    return text


def _number(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class WebhookProvider:
    """Provider for ``appId == "webhook"``.

    Example:
        >>> provider = WebhookProvider()
        >>> await provider(ProviderInput(
        ...     action_id="send_webhook",
        ...     config={"url": "https://example.com/hook", "body": {"a": 1}},
        ... ))
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize provider.

        Args:
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
        """
        self.transport = transport

    async def __call__(self, input: ProviderInput) -> Dict[str, Any]:
        if input.action_id == "send_webhook":
            return await self.send_webhook(input)
        return skipped(f"Webhook action not implemented: {input.action_id}")

    async def send_webhook(self, input: ProviderInput) -> Dict[str, Any]:
        """Send the request and return status, headers and parsed body.

        Raises:
            ProviderError: If the URL is missing or every attempt fails
        """
        config = input.config
        credential = (
            WebhookCredential.model_validate(input.credential) if input.credential else None
        )

        url = str(config.get("url") or "").strip()
        method = str(config.get("method") or "POST").strip().upper()
        body = config.get("body")

        if not url:
            raise ProviderError("Webhook send_webhook requires url")

        timeout_ms = _number(config.get("timeout"), DEFAULT_TIMEOUT_MS)
        if timeout_ms <= 0:
            timeout_ms = DEFAULT_TIMEOUT_MS
        retries = int(_number(config.get("retries"), 0))
        attempts = min(MAX_ATTEMPTS, retries + 1) if retries > 0 else 1

        headers = to_header_record(credential.headers if credential else None)
        headers.update(to_header_record(config.get("headers")))

        content = None
        if body is not None and method not in ("GET", "HEAD"):
            if not any(name.lower() == "content-type" for name in headers):
                headers["Content-Type"] = "application/json"
            content = body if isinstance(body, str) else json.dumps(body)

        last_error: Optional[Exception] = None
        async with httpx.AsyncClient(
            timeout=timeout_ms / 1000.0, transport=self.transport
        ) as client:
            for attempt in range(attempts):
                try:
                    response = await client.request(
                        method, url, headers=headers, content=content
                    )
                    data = parse_body(response)
                    if not response.is_success:
                        detail = data if isinstance(data, str) else json.dumps(data)
                        raise ProviderError(
                            f"Webhook request failed {response.status_code}: {detail}",
                            status_code=response.status_code,
                        )
                    return {
                        "ok": True,
                        "status": response.status_code,
                        "headers": dict(response.headers),
                        "data": data,
                        "text": response.text,
                    }
                except (httpx.HTTPError, ProviderError) as e:
                    last_error = e
                    logger.debug(
                        "Webhook attempt %d/%d to %s failed: %s",
                        attempt + 1,
                        attempts,
                        url,
                        e,
                    )

        if isinstance(last_error, ProviderError):
            raise last_error
        raise ProviderError(f"Webhook request failed: {last_error}") from last_error
