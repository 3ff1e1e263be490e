"""Core application modules: configuration, logging and dependencies."""
