"""
OpenAI-backed Structural Repairer.

Sends the mapped request and the provider's expected parameter schema
to a chat completions model and forces a `fix_request_structure`
function call whose arguments are the corrected request.

Fail-open: a missing API key, a non-2xx response, a response without
the function call, unparsable arguments, or any exception all return
the input request unchanged.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import structlog

from provider_bridge.gateway.repair.base import ProviderMeta, StructuralRepairer
from provider_bridge.gateway.schema import (
    REQUEST_BUCKETS,
    ParameterSchema,
    TransformedRequest,
)

logger = structlog.get_logger(__name__)

FUNCTION_NAME = "fix_request_structure"

FUNCTION_DEFINITION: Dict[str, Any] = {
    "name": FUNCTION_NAME,
    "description": "Fix the request structure to match the target provider API",
    "parameters": {
        "type": "object",
        "properties": {
            "body": {
                "type": "object",
                "description": "The corrected request body with actual data (not schema)",
            },
            "headers": {
                "type": "object",
                "description": "The corrected request headers with actual data (not schema)",
            },
            "parameters": {
                "type": "object",
                "description": "The corrected URL parameters with actual data (not schema)",
            },
            "query": {
                "type": "object",
                "description": "The corrected query parameters with actual data (not schema)",
            },
        },
        "required": list(REQUEST_BUCKETS),
    },
}

SYSTEM_PROMPT = """You are an expert API request transformer. You fix request structures so they match a specific AI provider API.

You receive two separate inputs:
- CURRENT REQUEST DATA: the actual request with real values.
- TARGET SCHEMA: the definition of the parameters the provider accepts.

Transform the CURRENT REQUEST DATA into the provider's expected format.
Return the transformed request data with its real values. Never return the TARGET SCHEMA itself, and never replace values with type names or descriptions.

Things to look for:
1. Field name differences ("messages" vs "contents", "content" vs "text").
2. Nesting differences ("content" vs "parts[0].text").
3. Role name variations ("user/assistant" vs "user/model").
4. Shape differences: when the provider expects a list of message objects and the data holds a plain string, wrap it, e.g. "Hello" becomes [{"role": "user", "content": "Hello"}].
5. Arrays versus objects.
6. Required versus optional fields.

Call fix_request_structure with the corrected body, headers, parameters and query."""


def build_repair_messages(
    transformed: TransformedRequest,
    provider_meta: ProviderMeta,
    provider_schema: ParameterSchema
) -> List[Dict[str, str]]:
    """Build the chat messages for a repair call, keeping data and schema apart."""
    user_prompt = json.dumps(
        {
            "provider": {
                "name": provider_meta.provider_name,
                "display_name": provider_meta.display_name,
                "endpoint_url": provider_meta.endpoint_url,
            },
            "current_request_data": transformed.to_dict(),
            "target_schema": provider_schema.to_catalog_dict(),
        },
        ensure_ascii=False,
        default=str,
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


def unwrap_data_envelope(bucket: Any) -> Dict[str, Any]:
    """
    Unwrap a bucket returned as `{"data": {...}}`.

    Models sometimes echo the schema's `{type, data}` layout around real
    values; only that envelope is removed, a sibling-bearing `data` key
    is a genuine field.
    """
    if not isinstance(bucket, dict):
        return {}
    inner = bucket.get("data")
    if isinstance(inner, dict) and set(bucket.keys()) <= {"data", "type"}:
        return dict(inner)
    return bucket


def parse_repair_response(payload: Dict[str, Any]) -> Optional[TransformedRequest]:
    """
    Extract the repaired request from a chat completions response.

    Accepts both the `tool_calls` format and the legacy `function_call`
    format. Returns None when the response does not carry a usable call.
    """
    choices = payload.get("choices") or []
    if not choices:
        return None
    message = choices[0].get("message") or {}

    call = None
    for tool_call in message.get("tool_calls") or []:
        function = tool_call.get("function") or {}
        if function.get("name") == FUNCTION_NAME:
            call = function
            break
    if call is None:
        legacy = message.get("function_call") or {}
        if legacy.get("name") == FUNCTION_NAME:
            call = legacy
    if call is None:
        return None

    try:
        arguments = json.loads(call.get("arguments") or "")
    except (TypeError, json.JSONDecodeError):
        return None
    if not isinstance(arguments, dict):
        return None
    if any(name not in arguments for name in REQUEST_BUCKETS):
        return None

    return TransformedRequest(**{
        name: unwrap_data_envelope(arguments.get(name)) for name in REQUEST_BUCKETS
    })


class OpenAIStructuralRepairer(StructuralRepairer):
    """
    Repairer calling an OpenAI-compatible chat completions endpoint.

    Args:
        api_key: Credential for the external model; repair is skipped when empty
        model: Chat model name
        base_url: API base, `/chat/completions` is appended
        temperature: Sampling temperature
        timeout_ms: Request timeout
        transport: Optional httpx transport (tests inject a MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.1,
        timeout_ms: int = 60000,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.timeout_ms = timeout_ms
        self._transport = transport

    async def repair(
        self,
        transformed: TransformedRequest,
        provider_meta: ProviderMeta,
        provider_schema: ParameterSchema
    ) -> TransformedRequest:
        if not self.api_key:
            logger.info("Structural repair skipped, no API key configured")
            return transformed

        try:
            payload = {
                "model": self.model,
                "temperature": self.temperature,
                "messages": build_repair_messages(transformed, provider_meta, provider_schema),
                "tools": [{"type": "function", "function": FUNCTION_DEFINITION}],
                "tool_choice": {"type": "function", "function": {"name": FUNCTION_NAME}},
            }

            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_ms / 1000),
                transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )

            if response.status_code >= 400:
                logger.warning(
                    "Structural repair call failed, using mapped request",
                    status_code=response.status_code,
                    provider=provider_meta.provider_name,
                )
                return transformed

            repaired = parse_repair_response(response.json())
            if repaired is None:
                logger.warning(
                    "Structural repair returned no usable function call, using mapped request",
                    provider=provider_meta.provider_name,
                )
                return transformed

            logger.info("Structural repair applied", provider=provider_meta.provider_name)
            return repaired

        except Exception as e:
            logger.warning(
                "Structural repair error, using mapped request",
                provider=provider_meta.provider_name,
                error=str(e),
            )
            return transformed
