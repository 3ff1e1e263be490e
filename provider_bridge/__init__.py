"""Provider Bridge - schema-driven AI provider gateway."""

__version__ = "0.1.0"
