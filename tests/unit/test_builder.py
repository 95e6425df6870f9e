"""Unit tests for the fluent task builder."""

from __future__ import annotations

import pytest

from inter_ai_protocol import (
    BuilderError,
    Constraints,
    DeliveryMethod,
    FailureAction,
    OutputFormat,
    OutputSpec,
    Sender,
    TaskBuilder,
    TaskSpec,
    validate,
)


def _base() -> TaskBuilder:
    return TaskBuilder(id_factory=lambda: "task-built").from_agent("researcher").intent("Do it")


def test_minimal_build() -> None:
    handoff = _base().build()

    assert handoff.task_id == "task-built"
    assert handoff.sender == Sender(agent_id="researcher")
    assert handoff.task == TaskSpec(intent="Do it")
    assert handoff.delivery is None
    assert validate(handoff) == []


def test_full_chain_produces_conformant_document() -> None:
    handoff = (
        TaskBuilder()
        .task_id("task-42")
        .from_agent("researcher", "me@agentmail.to", "langchain")
        .intent("Research AI security trends")
        .details("Focus on 2026")
        .context("prior notes")
        .context_ref("s3://bucket/notes")
        .async_delivery("https://example.com/hook", status_endpoint="https://example.com/status")
        .time_limit("30m")
        .token_budget(50_000)
        .tools_allowed(["search"])
        .tools_denied(["shell"])
        .scope("public sources")
        .requires_capabilities(["web"])
        .add_criterion("At least 5 sources")
        .add_criterion("Cited")
        .output_format(OutputFormat.MARKDOWN, schema="report.schema.json")
        .deliver_to("inbox")
        .on_failure(FailureAction.ESCALATE, max_retries=1, escalate_to="human")
        .build()
    )

    assert validate(handoff) == []
    payload = handoff.to_dict()
    assert payload["task_id"] == "task-42"
    assert payload["sender"] == {
        "agent_id": "researcher",
        "email": "me@agentmail.to",
        "framework": "langchain",
    }
    assert payload["delivery"] == {
        "method": "async",
        "webhook": "https://example.com/hook",
        "status_endpoint": "https://example.com/status",
    }
    assert payload["constraints"] == {
        "time_limit": "30m",
        "token_budget": 50_000,
        "tools_allowed": ["search"],
        "tools_denied": ["shell"],
        "scope": "public sources",
        "requires_capabilities": ["web"],
    }
    assert payload["success_criteria"] == ["At least 5 sources", "Cited"]
    assert payload["output"] == {
        "format": "markdown",
        "schema": "report.schema.json",
        "deliver_to": "inbox",
    }
    assert payload["on_failure"] == {"action": "escalate", "max_retries": 1, "escalate_to": "human"}


def test_missing_sender_is_rejected() -> None:
    with pytest.raises(BuilderError, match="sender is required"):
        TaskBuilder().intent("x").build()


@pytest.mark.parametrize("intent", [None, ""])
def test_missing_intent_is_rejected(intent: str | None) -> None:
    builder = TaskBuilder().from_agent("a")
    if intent is not None:
        builder.intent(intent)
    with pytest.raises(BuilderError, match="intent is required"):
        builder.build()


def test_later_delivery_replaces_earlier() -> None:
    handoff = _base().email_delivery("a@b.c").sync_delivery().build()
    assert handoff.delivery is not None
    assert handoff.delivery.method is DeliveryMethod.SYNC
    assert handoff.delivery.email is None


def test_constraint_setters_merge_and_object_setter_replaces() -> None:
    merged = _base().time_limit("1h").token_budget(10).build()
    assert merged.constraints == Constraints(time_limit="1h", token_budget=10)

    replaced = _base().time_limit("1h").constraints(Constraints(scope="x")).token_budget(3).build()
    assert replaced.constraints == Constraints(scope="x", token_budget=3)


def test_success_criteria_setter_replaces_and_add_appends() -> None:
    handoff = _base().add_criterion("a").success_criteria(["b", "c"]).add_criterion("d").build()
    assert handoff.success_criteria == ("b", "c", "d")


def test_deliver_to_without_format_is_reported_by_validator() -> None:
    handoff = _base().deliver_to("inbox").build()

    assert handoff.output == OutputSpec(deliver_to="inbox")
    assert [(item.path, item.message) for item in validate(handoff)] == [
        ("output.format", "Must be markdown, json, yaml, code, or freeform")
    ]


def test_task_object_setter_keeps_intent() -> None:
    handoff = (
        TaskBuilder()
        .sender(Sender(agent_id="a", callback="https://cb"))
        .task(TaskSpec(intent="from object", details="d"))
        .context("added later")
        .build()
    )
    assert handoff.task == TaskSpec(intent="from object", details="d", context="added later")
    assert handoff.sender.callback == "https://cb"


def test_string_enum_values_are_accepted() -> None:
    handoff = _base().output_format("json").on_failure("retry", max_retries=3).build()
    assert validate(handoff) == []
    assert handoff.to_dict()["on_failure"] == {"action": "retry", "max_retries": 3}
