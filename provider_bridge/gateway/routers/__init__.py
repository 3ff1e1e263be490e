"""Gateway API routers."""

from provider_bridge.gateway.routers.ai import router as ai_router
from provider_bridge.gateway.routers.authoring import router as authoring_router

__all__ = ["ai_router", "authoring_router"]
