"""Fluent builder for task handoff documents."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import fields
from typing import Any, cast

from inter_ai_protocol.domain.models import (
    Constraints,
    Delivery,
    DeliveryMethod,
    FailureAction,
    FailurePolicy,
    OutputFormat,
    OutputSpec,
    Sender,
    TaskHandoff,
    TaskSpec,
)
from inter_ai_protocol.factory import IdFactory, create_task


class BuilderError(ValueError):
    """Raised by ``TaskBuilder.build`` when a required input was never set."""


class TaskBuilder:
    """Accumulate handoff fields through chained setters, then ``build()``.

    Setters inside the task, constraints and output groups merge into what is
    already set; setters taking a complete object replace that group. A builder
    is single-owner and should be discarded after ``build()``.

    Example::

        handoff = (
            TaskBuilder()
            .from_agent("researcher", "me@agentmail.to")
            .intent("Research AI security trends")
            .async_delivery("https://example.com/hook")
            .time_limit("30m")
            .add_criterion("At least 5 sources")
            .build()
        )
    """

    def __init__(self, *, id_factory: IdFactory | None = None) -> None:
        self._id_factory = id_factory
        self._task_id: str | None = None
        self._sender: Sender | None = None
        self._delivery: Delivery | None = None
        self._task: dict[str, Any] = {}
        self._constraints: dict[str, Any] | None = None
        self._success_criteria: list[str] | None = None
        self._output: dict[str, Any] | None = None
        self._on_failure: FailurePolicy | None = None

    # identity -----------------------------------------------------------

    def task_id(self, task_id: str) -> TaskBuilder:
        """Set the task ID (generated at build time when never set)."""
        self._task_id = task_id
        return self

    def from_agent(
        self,
        agent_id: str,
        email: str | None = None,
        framework: str | None = None,
    ) -> TaskBuilder:
        self._sender = Sender(agent_id=agent_id, email=email, framework=framework)
        return self

    def sender(self, sender: Sender) -> TaskBuilder:
        self._sender = sender
        return self

    # task ---------------------------------------------------------------

    def intent(self, intent: str) -> TaskBuilder:
        self._task["intent"] = intent
        return self

    def details(self, details: str) -> TaskBuilder:
        self._task["details"] = details
        return self

    def context(self, context: str) -> TaskBuilder:
        self._task["context"] = context
        return self

    def context_ref(self, ref: str) -> TaskBuilder:
        self._task["context_ref"] = ref
        return self

    def task(self, task: TaskSpec) -> TaskBuilder:
        self._task = _fields_of(task)
        return self

    # delivery -----------------------------------------------------------

    def sync_delivery(self) -> TaskBuilder:
        self._delivery = Delivery(method=DeliveryMethod.SYNC)
        return self

    def async_delivery(self, webhook: str, status_endpoint: str | None = None) -> TaskBuilder:
        self._delivery = Delivery(
            method=DeliveryMethod.ASYNC,
            webhook=webhook,
            status_endpoint=status_endpoint,
        )
        return self

    def email_delivery(self, email: str) -> TaskBuilder:
        self._delivery = Delivery(method=DeliveryMethod.EMAIL, email=email)
        return self

    def delivery(self, delivery: Delivery) -> TaskBuilder:
        self._delivery = delivery
        return self

    # constraints --------------------------------------------------------

    def time_limit(self, limit: str) -> TaskBuilder:
        return self._set_constraint("time_limit", limit)

    def token_budget(self, budget: int | float) -> TaskBuilder:
        return self._set_constraint("token_budget", budget)

    def tools_allowed(self, tools: Sequence[str]) -> TaskBuilder:
        return self._set_constraint("tools_allowed", tuple(tools))

    def tools_denied(self, tools: Sequence[str]) -> TaskBuilder:
        return self._set_constraint("tools_denied", tuple(tools))

    def scope(self, scope: str) -> TaskBuilder:
        return self._set_constraint("scope", scope)

    def requires_capabilities(self, capabilities: Sequence[str]) -> TaskBuilder:
        return self._set_constraint("requires_capabilities", tuple(capabilities))

    def constraints(self, constraints: Constraints) -> TaskBuilder:
        self._constraints = _fields_of(constraints)
        return self

    # success criteria ---------------------------------------------------

    def success_criteria(self, criteria: Sequence[str]) -> TaskBuilder:
        self._success_criteria = list(criteria)
        return self

    def add_criterion(self, criterion: str) -> TaskBuilder:
        self._success_criteria = [*(self._success_criteria or []), criterion]
        return self

    # output -------------------------------------------------------------

    def output_format(self, format: OutputFormat | str, schema: str | None = None) -> TaskBuilder:
        self._output = {"format": format, "schema": schema}
        return self

    def deliver_to(self, location: str) -> TaskBuilder:
        self._output = {**(self._output or {}), "deliver_to": location}
        return self

    def output(self, output: OutputSpec) -> TaskBuilder:
        self._output = _fields_of(output)
        return self

    # failure policy -----------------------------------------------------

    def on_failure(
        self,
        action: FailureAction | str,
        max_retries: int | None = None,
        escalate_to: str | None = None,
    ) -> TaskBuilder:
        self._on_failure = FailurePolicy(
            action=action,
            max_retries=max_retries,
            escalate_to=escalate_to,
        )
        return self

    # finalization -------------------------------------------------------

    def build(self) -> TaskHandoff:
        """Create the handoff; only sender and intent are checked here."""
        if self._sender is None:
            raise BuilderError("sender is required - call from_agent() or sender()")
        if not self._task.get("intent"):
            raise BuilderError("intent is required - call intent() or task()")

        return create_task(
            task_id=self._task_id,
            sender=self._sender,
            delivery=self._delivery,
            task=TaskSpec(**self._task),
            constraints=None if self._constraints is None else Constraints(**self._constraints),
            success_criteria=self._success_criteria,
            output=None if self._output is None else OutputSpec(**self._output),
            on_failure=self._on_failure,
            id_factory=self._id_factory,
        )

    def _set_constraint(self, key: str, value: object) -> TaskBuilder:
        self._constraints = {**(self._constraints or {}), key: value}
        return self


def _fields_of(model: object) -> dict[str, Any]:
    # Shallow copy; nested values keep their identity and enum members.
    return {item.name: getattr(model, item.name) for item in fields(cast("type", model))}


__all__ = ["BuilderError", "TaskBuilder"]
