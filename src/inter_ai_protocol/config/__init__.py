"""
inter-ai-protocol config package public API.

File: src/inter_ai_protocol/config/__init__.py

Purpose
- Export CLI config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``iap.toml`` + ``IAP_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from inter_ai_protocol.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    load_config,
)
from inter_ai_protocol.config.schema import (
    DEFAULT_CONFIG,
    LOG_FORMATS,
    LOG_LEVELS,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    IAPConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "IAPConfig",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "merge_config",
    "validate_config",
]
