"""
Structural Repair Base Class.

Flat field mapping cannot express shape changes such as renaming keys
inside a list of message objects, or turning a plain string into a
one-element array of objects. A structural repairer gets one chance to
fix the mapped request after the pipeline has run.

Repairers are fail-open: they never raise. Any failure returns the
request they were given.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from provider_bridge.gateway.schema import ParameterSchema, TransformedRequest


@dataclass
class ProviderMeta:
    """Identity of the provider endpoint being targeted."""

    provider_name: str
    endpoint_url: str
    display_name: str


class StructuralRepairer(ABC):
    """
    Base class for structural repair implementations.

    Implementations should be stateless and safe to share between
    concurrent requests.
    """

    @abstractmethod
    async def repair(
        self,
        transformed: TransformedRequest,
        provider_meta: ProviderMeta,
        provider_schema: ParameterSchema
    ) -> TransformedRequest:
        """
        Attempt to reshape a mapped request to match the provider schema.

        Args:
            transformed: Output of the transformation pipeline
            provider_meta: Provider identity
            provider_schema: The shape the provider expects

        Returns:
            The repaired request, or `transformed` unchanged on any failure
        """
        pass


class NoopRepairer(StructuralRepairer):
    """Returns the request untouched. Used when repair is disabled and in tests."""

    async def repair(
        self,
        transformed: TransformedRequest,
        provider_meta: ProviderMeta,
        provider_schema: ParameterSchema
    ) -> TransformedRequest:
        return transformed
