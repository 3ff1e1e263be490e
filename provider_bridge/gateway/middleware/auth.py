"""
Gateway Caller Authentication.

Callers present one token in any of three header forms, checked in
this order:

1. `x-api-key: <token>`
2. `Authorization: Bearer <token>`
3. `apikey: <token>`

The token is then verified by a TokenValidator, which yields the
caller identity or nothing.
"""

import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from provider_bridge.gateway.errors import UnauthorizedError


@dataclass
class CallerIdentity:
    """Verified identity of the caller."""

    user_id: str
    # Raw key prefix for logging
    key_prefix: str


def key_prefix(token: str) -> str:
    """Loggable prefix of a token."""
    return token[:8] + "..." if len(token) > 8 else "***"


def extract_caller_token(headers: Mapping[str, str]) -> Optional[str]:
    """
    Extract the caller token from request headers.

    Header names are matched case-insensitively. Returns None when no
    form carries a non-empty token.
    """
    lowered = {key.lower(): value for key, value in headers.items()}

    token = (lowered.get("x-api-key") or "").strip()
    if token:
        return token

    authorization = (lowered.get("authorization") or "").strip()
    if authorization[:7].lower() == "bearer ":
        token = authorization[7:].strip()
        if token:
            return token

    token = (lowered.get("apikey") or "").strip()
    return token or None


class TokenValidator(ABC):
    """Verifies caller tokens."""

    @abstractmethod
    async def validate(self, token: str) -> Optional[CallerIdentity]:
        """Return the caller identity for a valid token, else None."""
        pass


class StaticTokenValidator(TokenValidator):
    """
    Validates against a fixed token -> user id table.

    Every configured token is compared in constant time.
    """

    def __init__(self, tokens: Dict[str, str]):
        self._tokens = dict(tokens)

    async def validate(self, token: str) -> Optional[CallerIdentity]:
        matched: Optional[str] = None
        for known, user_id in self._tokens.items():
            if secrets.compare_digest(known.encode(), token.encode()):
                matched = user_id
        if matched is None:
            return None
        return CallerIdentity(user_id=matched, key_prefix=key_prefix(token))


async def authenticate_caller(
    headers: Mapping[str, str],
    validator: TokenValidator
) -> CallerIdentity:
    """
    Authenticate a caller from request headers.

    Raises:
        UnauthorizedError: Token missing or rejected
    """
    token = extract_caller_token(headers)
    if not token:
        raise UnauthorizedError("API key is required")

    identity = await validator.validate(token)
    if identity is None:
        raise UnauthorizedError("Invalid API key")
    return identity
