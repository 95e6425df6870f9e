"""
inter-ai-protocol — unit tests for document models

File: tests/unit/domain/test_models.py

Purpose
- Validate structural decoding, ordered serialization, and unknown-key retention.

What this test file should cover
- Wire field order and omission of absent optionals.
- ``from_dict`` shape errors carry the failing path.
- Lists handed to constructors are frozen to tuples; extras become read-only copies.
"""

from __future__ import annotations

import json

import pytest

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
    to_json_value,
)


def _handoff(**overrides: object) -> TaskHandoff:
    values: dict[str, object] = {
        "task_id": "task-1",
        "sender": Sender(agent_id="researcher"),
        "task": TaskSpec(intent="Summarize"),
    }
    values.update(overrides)
    return TaskHandoff(**values)  # type: ignore[arg-type]


def test_minimal_handoff_serializes_in_wire_order() -> None:
    handoff = _handoff(delivery=Delivery(method=DeliveryMethod.SYNC))

    payload = handoff.to_dict()

    assert list(payload) == ["iap_version", "task_id", "sender", "delivery", "task"]
    assert payload["iap_version"] == "0.2"
    assert payload["delivery"] == {"method": "sync"}
    assert payload["sender"] == {"agent_id": "researcher"}


def test_to_json_is_compact() -> None:
    encoded = _handoff().to_json()
    assert " " not in encoded.replace("Summarize", "")
    assert json.loads(encoded)["task"] == {"intent": "Summarize"}


def test_full_handoff_round_trips_through_dict() -> None:
    handoff = _handoff(
        sender=Sender(agent_id="a", email="a@example.com", framework="langchain", callback="cb"),
        delivery=Delivery(method=DeliveryMethod.ASYNC, webhook="https://hook", status_endpoint="s"),
        task=TaskSpec(intent="Do", details="More", context="ctx", context_ref="ref"),
        constraints=Constraints(
            time_limit="30m",
            token_budget=5000,
            tools_allowed=["search"],
            tools_denied=("shell",),
            scope="docs",
            requires_capabilities=["web"],
        ),
        success_criteria=["one", "two"],
        output=OutputSpec(format=OutputFormat.MARKDOWN, schema="s.json", deliver_to="inbox"),
        on_failure=FailurePolicy(action=FailureAction.ESCALATE, max_retries=2, escalate_to="ops"),
    )

    decoded = TaskHandoff.from_dict(handoff.to_dict())

    assert decoded == handoff
    assert decoded.constraints is not None
    assert decoded.constraints.tools_allowed == ("search",)
    assert decoded.success_criteria == ("one", "two")
    assert decoded.delivery is not None
    assert decoded.delivery.method is DeliveryMethod.ASYNC


def test_unknown_keys_are_kept_as_extras() -> None:
    payload = {
        "iap_version": "0.2",
        "task_id": "t",
        "sender": {"agent_id": "a", "x-team": "blue"},
        "task": {"intent": "i"},
        "x-trace": {"span": 1},
    }

    decoded = TaskHandoff.from_dict(payload)

    assert decoded.extras == {"x-trace": {"span": 1}}
    assert decoded.sender.extras == {"x-team": "blue"}
    assert decoded.to_dict() == payload


def test_none_values_count_as_absent() -> None:
    payload = {
        "iap_version": "0.2",
        "task_id": "t",
        "sender": {"agent_id": "a", "email": None},
        "task": {"intent": "i"},
        "delivery": None,
    }

    decoded = TaskHandoff.from_dict(payload)

    assert decoded.delivery is None
    assert decoded.sender.email is None
    assert "delivery" not in decoded.to_dict()


@pytest.mark.parametrize(
    ("payload", "path"),
    [
        ([], ""),
        ({"iap_version": "0.2", "task_id": "t", "task": {"intent": "i"}}, "sender"),
        (
            {"iap_version": "0.2", "task_id": 7, "sender": {"agent_id": "a"}, "task": {"intent": "i"}},
            "task_id",
        ),
        (
            {
                "iap_version": "0.2",
                "task_id": "t",
                "sender": {"agent_id": "a"},
                "task": {"intent": "i"},
                "constraints": {"tools_allowed": ["ok", 3]},
            },
            "constraints.tools_allowed[1]",
        ),
        (
            {
                "iap_version": "0.2",
                "task_id": "t",
                "sender": {"agent_id": "a"},
                "task": {"intent": "i"},
                "constraints": {"token_budget": True},
            },
            "constraints.token_budget",
        ),
        (
            {
                "iap_version": "0.2",
                "task_id": "t",
                "sender": {"agent_id": "a"},
                "task": {"intent": "i"},
                "output": {"format": "pdf"},
            },
            "output.format",
        ),
    ],
)
def test_from_dict_reports_failing_path(payload: object, path: str) -> None:
    with pytest.raises(ModelDecodeError) as excinfo:
        TaskHandoff.from_dict(payload)
    assert excinfo.value.path == path


def test_from_json_rejects_invalid_text() -> None:
    with pytest.raises(ModelDecodeError, match="invalid JSON"):
        TaskHandoff.from_json("{nope")


def test_result_serialization_keeps_arbitrary_payload() -> None:
    result = TaskResult(
        task_id="task-1",
        status=TaskStatus.COMPLETE,
        result={"summary": ["a", "b"], "score": 0.5},
        criteria_met=["x"],
        metadata=ResultMetadata(completed_at="2026-01-01T00:00:00.000Z", tokens_used=12),
    )

    payload = result.to_dict()

    assert list(payload) == ["task_id", "status", "result", "criteria_met", "metadata"]
    assert payload["status"] == "complete"
    assert payload["metadata"] == {"completed_at": "2026-01-01T00:00:00.000Z", "tokens_used": 12}
    assert TaskResult.from_dict(payload) == result


def test_to_json_value_rejects_non_finite_floats() -> None:
    with pytest.raises(ModelDecodeError, match="finite"):
        to_json_value({"n": float("nan")})


def test_models_are_frozen() -> None:
    sender = Sender(agent_id="a")
    with pytest.raises(AttributeError):
        sender.agent_id = "b"  # type: ignore[misc]


def test_extras_are_a_read_only_copy() -> None:
    supplied: dict[str, object] = {"x-priority": "high"}
    handoff = _handoff(extras=supplied)

    supplied["x-priority"] = "low"
    supplied["x-late"] = True

    assert handoff.extras == {"x-priority": "high"}
    with pytest.raises(TypeError):
        handoff.extras["x-priority"] = "low"  # type: ignore[index]
    with pytest.raises(TypeError):
        Sender(agent_id="a").extras["x-team"] = "blue"  # type: ignore[index]


def test_equal_models_hash_equally() -> None:
    first = _handoff(extras={"x-priority": "high"})
    second = _handoff(extras={"x-priority": "high"})
    assert first == second
    assert hash(first) == hash(second)
    assert len({first, second}) == 1
    result = TaskResult(task_id="t", status=TaskStatus.COMPLETE, result={"rows": [1]})
    assert isinstance(hash(result), int)
