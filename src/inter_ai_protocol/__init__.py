"""
inter-ai-protocol — task handoff documents for autonomous agents

File: src/inter_ai_protocol/__init__.py

Purpose
- Reference library for the Inter-AI Protocol (IAP) task handoff schema, revision 0.2.
- Construct, validate, serialize and parse handoff documents.

Import boundary rules
- No side effects at import time: no config loading, no logging handlers.
- The CLI (``inter_ai_protocol.ui``) and config layers are not imported here.
"""

from inter_ai_protocol.builder import BuilderError, TaskBuilder
from inter_ai_protocol.codec import JSON_ONLY_MESSAGE, ParseError, parse, serialize
from inter_ai_protocol.constants import IAP_VERSION
from inter_ai_protocol.domain.ids import generate_task_id, validate_task_id
from inter_ai_protocol.domain.models import (
    Constraints,
    Delivery,
    DeliveryMethod,
    FailureAction,
    FailurePolicy,
    ModelDecodeError,
    OutputFormat,
    OutputSpec,
    ResultMetadata,
    Sender,
    TaskHandoff,
    TaskResult,
    TaskSpec,
    TaskStatus,
)
from inter_ai_protocol.factory import create_result, create_task
from inter_ai_protocol.validation import InvalidTaskError, ValidationIssue, is_valid, validate

__version__ = "0.1.0"

__all__ = [
    "BuilderError",
    "Constraints",
    "Delivery",
    "DeliveryMethod",
    "FailureAction",
    "FailurePolicy",
    "IAP_VERSION",
    "InvalidTaskError",
    "JSON_ONLY_MESSAGE",
    "ModelDecodeError",
    "OutputFormat",
    "OutputSpec",
    "ParseError",
    "ResultMetadata",
    "Sender",
    "TaskBuilder",
    "TaskHandoff",
    "TaskResult",
    "TaskSpec",
    "TaskStatus",
    "ValidationIssue",
    "__version__",
    "create_result",
    "create_task",
    "generate_task_id",
    "is_valid",
    "parse",
    "serialize",
    "validate",
    "validate_task_id",
]
