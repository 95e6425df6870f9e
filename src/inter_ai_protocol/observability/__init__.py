"""Public observability primitives: CLI logging setup."""

from inter_ai_protocol.observability.logging import LOGGER_NAME, LogFormat, setup_logging

__all__ = ["LOGGER_NAME", "LogFormat", "setup_logging"]
