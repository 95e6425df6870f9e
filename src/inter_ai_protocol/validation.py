"""Conformance checks for IAP task handoff documents.

``validate`` maps any candidate value to an ordered list of issues and never
raises. The evaluation order is fixed so that identical input always yields the
same list:

1. document type (stops here if the candidate is not an object)
2. ``iap_version``
3. ``task_id``
4. ``sender`` / ``sender.agent_id``
5. ``task`` / ``task.intent``
6. ``delivery`` and its method-dependent fields
7. ``output.format``
8. ``on_failure.action``

Unknown keys are ignored everywhere; a key mapped to ``None`` counts as absent.
A model whose fields cannot be rendered as JSON yields a single issue at the
offending field path.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from inter_ai_protocol.constants import (
    DELIVERY_METHODS,
    FAILURE_ACTIONS,
    IAP_VERSION,
    OUTPUT_FORMATS,
    VERSION_FIELD,
)
from inter_ai_protocol.domain.models import CanonicalModel, ModelDecodeError

_MSG_NOT_OBJECT = "Task must be an object"
_MSG_REQUIRED_STRING = "Required string"
_MSG_REQUIRED_OBJECT = "Required object"
_MSG_MUST_BE_OBJECT = "Must be an object"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """Single conformance failure; ``path`` is empty for document-level issues."""

    path: str
    message: str

    def render(self) -> str:
        return f"{self.path}: {self.message}"


class InvalidTaskError(ValueError):
    """Raised when a decoded document fails validation."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = ", ".join(item.render() for item in self.issues)
        super().__init__(f"Invalid IAP task: {rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ValidationIssue(path=path, message=message))

    def items(self) -> list[ValidationIssue]:
        return list(self._items)


def validate(candidate: object) -> list[ValidationIssue]:
    """Return every conformance issue for ``candidate`` in evaluation order."""

    issues = _IssueCollector()
    document: Mapping[str, object]
    if isinstance(candidate, CanonicalModel):
        try:
            document = candidate.to_dict()
        except ModelDecodeError as exc:
            issues.add(exc.path, exc.message)
            return issues.items()
    elif isinstance(candidate, Mapping):
        document = candidate
    else:
        issues.add("", _MSG_NOT_OBJECT)
        return issues.items()

    if document.get(VERSION_FIELD) != IAP_VERSION:
        issues.add(VERSION_FIELD, f'Must be "{IAP_VERSION}"')

    if not _is_non_empty_str(document.get("task_id")):
        issues.add("task_id", _MSG_REQUIRED_STRING)

    _validate_required_section(document, "sender", "agent_id", issues)
    _validate_required_section(document, "task", "intent", issues)
    _validate_delivery(document.get("delivery"), issues)
    _validate_enum_section(
        document.get("output"),
        "output",
        "format",
        OUTPUT_FORMATS,
        "Must be markdown, json, yaml, code, or freeform",
        issues,
    )
    _validate_enum_section(
        document.get("on_failure"),
        "on_failure",
        "action",
        FAILURE_ACTIONS,
        "Must be return_partial, retry, escalate, or abort",
        issues,
    )
    return issues.items()


def is_valid(candidate: object) -> bool:
    """Return ``True`` when ``validate`` reports no issues."""

    return len(validate(candidate)) == 0


def _validate_required_section(
    document: Mapping[str, object],
    key: str,
    required_field: str,
    issues: _IssueCollector,
) -> None:
    section = document.get(key)
    if not isinstance(section, Mapping):
        issues.add(key, _MSG_REQUIRED_OBJECT)
        return
    if not _is_non_empty_str(section.get(required_field)):
        issues.add(f"{key}.{required_field}", _MSG_REQUIRED_STRING)


def _validate_delivery(delivery: object, issues: _IssueCollector) -> None:
    if delivery is None:
        return
    if not isinstance(delivery, Mapping):
        issues.add("delivery", _MSG_MUST_BE_OBJECT)
        return

    method = delivery.get("method")
    if not _is_member(method, DELIVERY_METHODS):
        issues.add("delivery.method", 'Must be "sync", "async", or "email"')
    if method == "async" and not delivery.get("webhook"):
        issues.add("delivery.webhook", "Required for async delivery")
    if method == "email" and not delivery.get("email"):
        issues.add("delivery.email", "Required for email delivery")


def _validate_enum_section(
    section: object,
    key: str,
    enum_field: str,
    allowed: tuple[str, ...],
    message: str,
    issues: _IssueCollector,
) -> None:
    if section is None:
        return
    if not isinstance(section, Mapping):
        issues.add(key, _MSG_MUST_BE_OBJECT)
        return
    if not _is_member(section.get(enum_field), allowed):
        issues.add(f"{key}.{enum_field}", message)


def _is_non_empty_str(value: object) -> bool:
    return isinstance(value, str) and value != ""


def _is_member(value: object, allowed: tuple[str, ...]) -> bool:
    # Exact, case-sensitive match; StrEnum members compare equal to their values.
    return isinstance(value, str) and value in allowed


__all__ = ["InvalidTaskError", "ValidationIssue", "is_valid", "validate"]
