"""Application lifecycle events."""

from dishes_api.core.events.lifespan import lifespan


__all__ = ["lifespan"]
