"""Stable protocol constants shared across the library."""

from __future__ import annotations

from typing import Final

# Supported protocol revision; emitted on the wire as ``iap_version``.
IAP_VERSION: Final[str] = "0.2"
VERSION_FIELD: Final[str] = "iap_version"

# Literal sets, in wire order. Tuples keep membership checks safe for unhashable input.
DELIVERY_METHODS: Final[tuple[str, ...]] = ("sync", "async", "email")
OUTPUT_FORMATS: Final[tuple[str, ...]] = ("markdown", "json", "yaml", "code", "freeform")
FAILURE_ACTIONS: Final[tuple[str, ...]] = ("return_partial", "retry", "escalate", "abort")
TASK_STATUSES: Final[tuple[str, ...]] = ("complete", "partial", "failed", "in_progress")

TASK_ID_PREFIX: Final[str] = "task"

__all__ = [
    "DELIVERY_METHODS",
    "FAILURE_ACTIONS",
    "IAP_VERSION",
    "OUTPUT_FORMATS",
    "TASK_ID_PREFIX",
    "TASK_STATUSES",
    "VERSION_FIELD",
]
