"""Document factory: build handoffs and results from structured inputs.

Neither function validates. A caller may assemble a non-conformant document on
purpose (negative tests, fixtures); run ``validate`` to check conformance.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from inter_ai_protocol.constants import IAP_VERSION
from inter_ai_protocol.domain.ids import generate_task_id
from inter_ai_protocol.domain.models import (
    Constraints,
    Delivery,
    FailurePolicy,
    OutputSpec,
    ResultMetadata,
    Sender,
    TaskHandoff,
    TaskResult,
    TaskSpec,
    TaskStatus,
)

IdFactory = Callable[[], str]
Clock = Callable[[], datetime]


def create_task(
    *,
    sender: Sender,
    task: TaskSpec,
    task_id: str | None = None,
    delivery: Delivery | None = None,
    constraints: Constraints | None = None,
    success_criteria: Sequence[str] | None = None,
    output: OutputSpec | None = None,
    on_failure: FailurePolicy | None = None,
    id_factory: IdFactory | None = None,
) -> TaskHandoff:
    """Create a task handoff, generating ``task_id`` when none is given."""

    resolved_id = task_id
    if resolved_id is None:
        resolved_id = (id_factory or generate_task_id)()

    return TaskHandoff(
        iap_version=IAP_VERSION,
        task_id=resolved_id,
        sender=sender,
        delivery=delivery,
        task=task,
        constraints=constraints,
        success_criteria=None if success_criteria is None else tuple(success_criteria),
        output=output,
        on_failure=on_failure,
    )


def create_result(
    *,
    task_id: str,
    status: TaskStatus | str,
    result: object = None,
    error: str | None = None,
    criteria_met: Sequence[str] | None = None,
    criteria_unmet: Sequence[str] | None = None,
    agent_id: str | None = None,
    started_at: datetime | str | None = None,
    tokens_used: int | float | None = None,
    clock: Clock | None = None,
) -> TaskResult:
    """Create a task result stamped with the completion time.

    ``metadata.completed_at`` is always read from ``clock`` (UTC now by
    default); it is the only ambient input this module consumes.
    """

    completed = (clock or _utc_now)()
    return TaskResult(
        task_id=task_id,
        status=status,
        result=result,
        error=error,
        criteria_met=None if criteria_met is None else tuple(criteria_met),
        criteria_unmet=None if criteria_unmet is None else tuple(criteria_unmet),
        metadata=ResultMetadata(
            started_at=_as_timestamp(started_at),
            completed_at=_as_timestamp(completed),
            tokens_used=tokens_used,
            agent_id=agent_id,
        ),
    )


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as ISO-8601 UTC with millisecond precision and ``Z`` suffix."""

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime must be timezone-aware")
    normalized = value.astimezone(UTC)
    return normalized.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_timestamp(value: datetime | str | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return format_timestamp(value)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


__all__ = ["Clock", "IdFactory", "create_result", "create_task", "format_timestamp"]
