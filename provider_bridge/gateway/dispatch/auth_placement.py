"""
Provider Credential Placement.

Where the upstream secret goes depends on the provider. Most providers
take `Authorization: Bearer <key>`; some use a dedicated header.
New providers are registered here without touching the pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class AuthStyle(str, Enum):
    """How the credential is attached to the outbound request."""

    BEARER = "bearer"
    HEADER = "header"


@dataclass(frozen=True)
class AuthPlacement:
    """Credential placement for one provider."""

    style: AuthStyle = AuthStyle.BEARER
    header_name: str = "Authorization"

    def headers_for(self, secret: str) -> Dict[str, str]:
        if self.style == AuthStyle.BEARER:
            return {self.header_name: f"Bearer {secret}"}
        return {self.header_name: secret}


BEARER = AuthPlacement()

# Registry of provider slug -> placement
_PLACEMENTS: Dict[str, AuthPlacement] = {
    "openai": BEARER,
    "anthropic": BEARER,
    "claude": BEARER,
    "gemini": AuthPlacement(style=AuthStyle.HEADER, header_name="x-goog-api-key"),
}


def register_auth_placement(provider_slug: str, placement: AuthPlacement) -> None:
    """
    Register how a provider expects its credential.

    Args:
        provider_slug: Provider identifier (case-insensitive)
        placement: Where and how to attach the secret
    """
    _PLACEMENTS[provider_slug.lower()] = placement


def get_auth_placement(provider_slug: str) -> AuthPlacement:
    """Placement for a provider, Bearer when none is registered."""
    return _PLACEMENTS.get(provider_slug.lower(), BEARER)


def apply_credentials(
    headers: Dict[str, str],
    provider_slug: str,
    secret: Optional[str]
) -> Dict[str, str]:
    """Return a copy of `headers` with the provider credential attached."""
    result = dict(headers)
    if secret:
        result.update(get_auth_placement(provider_slug).headers_for(secret))
    return result
