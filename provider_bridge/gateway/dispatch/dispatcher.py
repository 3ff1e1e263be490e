"""
Provider Dispatcher.

Sends a transformed request to the provider endpoint and returns the
decoded response:

1. Look up the provider secret from process configuration.
2. Substitute `{name}` / `:name` URL placeholders from `parameters`.
3. Merge the remaining `parameters` into the request headers.
4. Append `query` as a query string; lists are comma-joined.
5. POST the body as JSON.

A non-2xx answer or a transport failure raises ProviderError (502).
"""

import json
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote, urlsplit

import httpx
import structlog

from provider_bridge.core.config import get_provider_secret, provider_secret_env_name
from provider_bridge.gateway.dispatch.auth_placement import apply_credentials
from provider_bridge.gateway.errors import ConfigurationError, NotFoundError, ProviderError
from provider_bridge.gateway.mapping.url_params import PATH_PARAM_PATTERN
from provider_bridge.gateway.schema import TransformedRequest

logger = structlog.get_logger(__name__)


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    if value is None:
        return ""
    return str(value)


def _query_value(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(_stringify(item) for item in value)
    return _stringify(value)


def substitute_path_parameters(
    url: str,
    parameters: Dict[str, Any]
) -> Tuple[str, Dict[str, Any]]:
    """
    Fill URL placeholders from the parameters bucket.

    Returns:
        Tuple of (url, parameters not consumed by a placeholder)
    """
    used = set()

    def replace(match):
        name = match.group(1) or match.group(2)
        if name not in parameters:
            return match.group(0)
        used.add(name)
        return quote(_stringify(parameters[name]), safe="")

    rendered = PATH_PARAM_PATTERN.sub(replace, url)
    remaining = {key: value for key, value in parameters.items() if key not in used}
    return rendered, remaining


def _require_dispatchable(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise ConfigurationError("Provider endpoint URL is not configured")
    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(
            f"Provider endpoint URL is invalid: {url}",
            details={"url": url},
        )
    return url.strip()


class ProviderDispatcher:
    """
    Executes the single outbound provider call.

    Args:
        timeout_ms: Request timeout
        transport: Optional httpx transport (tests inject a MockTransport)
    """

    def __init__(
        self,
        timeout_ms: int = 120000,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout_ms = timeout_ms
        self._transport = transport

    def build_request(
        self,
        url: str,
        transformed: TransformedRequest,
        provider_slug: str,
        secret: str
    ) -> Tuple[str, Dict[str, str], Dict[str, str]]:
        """
        Compose URL, headers and query parameters for the outbound call.

        Returns:
            Tuple of (url, headers, query params)
        """
        target, remaining = substitute_path_parameters(
            _require_dispatchable(url), transformed.parameters
        )

        headers = {"Content-Type": "application/json"}
        for key, value in transformed.headers.items():
            headers[str(key)] = _stringify(value)
        # Unconsumed URL parameters travel as headers
        for key, value in remaining.items():
            headers[str(key)] = _stringify(value)
        headers = apply_credentials(headers, provider_slug, secret)

        params = {str(key): _query_value(value) for key, value in transformed.query.items()}
        return target, headers, params

    async def dispatch(
        self,
        url: str,
        transformed: TransformedRequest,
        provider_slug: str
    ) -> Any:
        """
        Send the request and return the provider's decoded JSON.

        Raises:
            NotFoundError: No secret configured for the provider
            ConfigurationError: Endpoint URL missing or invalid
            ProviderError: Non-2xx status or transport failure
        """
        secret = get_provider_secret(provider_slug)
        if not secret:
            raise NotFoundError(
                f"Provider API key not found for {provider_slug}",
                details={"env": provider_secret_env_name(provider_slug)},
            )

        target, headers, params = self.build_request(url, transformed, provider_slug, secret)

        logger.info(
            "Dispatching provider request",
            provider=provider_slug,
            url=target,
            query_keys=sorted(params.keys()),
        )

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_ms / 1000),
                transport=self._transport
            ) as client:
                response = await client.post(
                    target,
                    headers=headers,
                    params=params or None,
                    json=transformed.body,
                )
        except httpx.HTTPError as e:
            logger.warning("Provider request failed", provider=provider_slug, error=str(e))
            raise ProviderError(f"Provider request failed: {e}")

        if response.status_code < 200 or response.status_code >= 300:
            logger.warning(
                "Provider returned error status",
                provider=provider_slug,
                status_code=response.status_code,
            )
            raise ProviderError(
                f"Provider API error: {response.status_code} - {response.text}",
                upstream_status=response.status_code,
                upstream_body=response.text,
            )

        logger.info(
            "Provider request succeeded",
            provider=provider_slug,
            status_code=response.status_code,
        )

        try:
            return response.json()
        except ValueError:
            return {"text": response.text}
