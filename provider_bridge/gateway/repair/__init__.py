"""
Structural Repair Package.

Usage:
    from provider_bridge.gateway.repair import get_repairer

    repairer = get_repairer(settings.repair)
    repaired = await repairer.repair(transformed, provider_meta, provider_schema)
"""

from provider_bridge.core.config import RepairSettings
from provider_bridge.gateway.repair.base import NoopRepairer, ProviderMeta, StructuralRepairer
from provider_bridge.gateway.repair.openai_repairer import (
    FUNCTION_DEFINITION,
    OpenAIStructuralRepairer,
    build_repair_messages,
    parse_repair_response,
    unwrap_data_envelope,
)


def get_repairer(repair_settings: RepairSettings) -> StructuralRepairer:
    """Build the configured repairer."""
    if not repair_settings.enabled:
        return NoopRepairer()
    return OpenAIStructuralRepairer(
        api_key=repair_settings.openai_api_key,
        model=repair_settings.model,
        base_url=repair_settings.base_url,
        temperature=repair_settings.temperature,
        timeout_ms=repair_settings.timeout_ms,
    )


__all__ = [
    "FUNCTION_DEFINITION",
    "NoopRepairer",
    "OpenAIStructuralRepairer",
    "ProviderMeta",
    "StructuralRepairer",
    "build_repair_messages",
    "get_repairer",
    "parse_repair_response",
    "unwrap_data_envelope",
]
