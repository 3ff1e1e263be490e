"""
Gateway Data Plane Route.

`POST /api/v1/ai` accepts one canonical request, translates it for the
selected provider endpoint, dispatches it and wraps the provider's
response in the standard envelope.
"""

import json

from fastapi import APIRouter, Request

from provider_bridge.core.dependencies import Caller, Engine
from provider_bridge.gateway.errors import BadRequestError, success_envelope

router = APIRouter(prefix="/api/v1", tags=["gateway"])


@router.post("/ai")
async def ai_request(request: Request, caller: Caller, engine: Engine):
    """
    Translate and dispatch a canonical AI request.

    The body must carry `model`, plus `provider` and `provider_function`
    unless `model` is `auto`. All other fields are mapped onto the
    provider's request shape.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequestError("Request body must be valid JSON")

    result = await engine.handle(body, caller)
    return success_envelope(result.data, result.message)
