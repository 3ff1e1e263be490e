"""Gateway middleware components."""

from provider_bridge.gateway.middleware.auth import (
    CallerIdentity,
    StaticTokenValidator,
    TokenValidator,
    authenticate_caller,
    extract_caller_token,
)
from provider_bridge.gateway.middleware.trace import (
    REQUEST_ID_HEADER,
    RequestTimer,
    extract_or_generate_request_id,
    generate_request_id,
)

__all__ = [
    "CallerIdentity",
    "REQUEST_ID_HEADER",
    "RequestTimer",
    "StaticTokenValidator",
    "TokenValidator",
    "authenticate_caller",
    "extract_caller_token",
    "extract_or_generate_request_id",
    "generate_request_id",
]
