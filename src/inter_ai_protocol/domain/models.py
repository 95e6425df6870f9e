"""Dataclass models for IAP documents with structural decoding and ordered serialization.

Models are plain snapshots: constructing one never validates business rules, so a
caller can deliberately build a non-conformant document. Conformance is decided by
``inter_ai_protocol.validation``. ``from_dict`` only checks JSON shape (object vs
string vs number) so that attribute types hold after decoding.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum, StrEnum
from types import MappingProxyType
from typing import ClassVar, NoReturn, TypeVar, cast

from inter_ai_protocol.constants import IAP_VERSION

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

TModel = TypeVar("TModel", bound="CanonicalModel")
TEnum = TypeVar("TEnum", bound=Enum)

_EXTRAS_FIELD = "extras"


class DeliveryMethod(StrEnum):
    SYNC = "sync"
    ASYNC = "async"
    EMAIL = "email"


class OutputFormat(StrEnum):
    MARKDOWN = "markdown"
    JSON = "json"
    YAML = "yaml"
    CODE = "code"
    FREEFORM = "freeform"


class FailureAction(StrEnum):
    RETURN_PARTIAL = "return_partial"
    RETRY = "retry"
    ESCALATE = "escalate"
    ABORT = "abort"


class TaskStatus(StrEnum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"


class ModelDecodeError(ValueError):
    """Raised when a known field has the wrong JSON shape."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)


class CanonicalModel:
    """Mixin for ordered dict/json serialization.

    Declared fields are emitted in declaration order with ``None`` values
    omitted, followed by any unknown keys retained in ``extras``.
    """

    _wire_name: ClassVar[str] = ""

    def to_dict(self) -> dict[str, JSONValue]:
        serialized = to_json_value(self, self._wire_name)
        if not isinstance(serialized, dict):
            _fail(self._wire_name, "serialized model must be an object")
        return serialized

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls: type[TModel], raw: str) -> TModel:
        if not isinstance(raw, str):
            _fail(cls._wire_name, f"expected JSON string, got {type(raw).__name__}")
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            _fail(cls._wire_name, f"invalid JSON: {exc}")
        return cls.from_dict(parsed)

    @classmethod
    def from_dict(cls: type[TModel], data: object, path: str | None = None) -> TModel:
        _fail(cls._wire_name, "from_dict is not implemented for this model type")


def _fail(path: str, message: str) -> NoReturn:
    raise ModelDecodeError(path, message)


def _freeze(instance: object, *sequence_names: str) -> None:
    # Caller lists become tuples; extras become a read-only copy of the caller's mapping.
    for name in sequence_names:
        value = getattr(instance, name)
        if isinstance(value, list):
            object.__setattr__(instance, name, tuple(value))
    extras = getattr(instance, _EXTRAS_FIELD)
    object.__setattr__(instance, _EXTRAS_FIELD, MappingProxyType(dict(extras)))


@dataclass(frozen=True, slots=True)
class Sender(CanonicalModel):
    _wire_name: ClassVar[str] = "sender"

    agent_id: str
    email: str | None = None
    framework: str | None = None
    callback: str | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self)

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> Sender:
        base = cls._wire_name if path is None else path
        parsed, extras = _split_object(data, base, cls)
        return cls(
            agent_id=_as_str(_require(parsed, "agent_id", base), _join(base, "agent_id")),
            email=_as_optional_str(parsed.get("email"), _join(base, "email")),
            framework=_as_optional_str(parsed.get("framework"), _join(base, "framework")),
            callback=_as_optional_str(parsed.get("callback"), _join(base, "callback")),
            extras=extras,
        )


@dataclass(frozen=True, slots=True)
class TaskSpec(CanonicalModel):
    _wire_name: ClassVar[str] = "task"

    intent: str
    details: str | None = None
    context: str | None = None
    context_ref: str | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self)

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> TaskSpec:
        base = cls._wire_name if path is None else path
        parsed, extras = _split_object(data, base, cls)
        return cls(
            intent=_as_str(_require(parsed, "intent", base), _join(base, "intent")),
            details=_as_optional_str(parsed.get("details"), _join(base, "details")),
            context=_as_optional_str(parsed.get("context"), _join(base, "context")),
            context_ref=_as_optional_str(parsed.get("context_ref"), _join(base, "context_ref")),
            extras=extras,
        )


@dataclass(frozen=True, slots=True)
class Delivery(CanonicalModel):
    _wire_name: ClassVar[str] = "delivery"

    method: DeliveryMethod | str
    webhook: str | None = None
    email: str | None = None
    status_endpoint: str | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self)

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> Delivery:
        base = cls._wire_name if path is None else path
        parsed, extras = _split_object(data, base, cls)
        return cls(
            method=_as_enum(DeliveryMethod, _require(parsed, "method", base), _join(base, "method")),
            webhook=_as_optional_str(parsed.get("webhook"), _join(base, "webhook")),
            email=_as_optional_str(parsed.get("email"), _join(base, "email")),
            status_endpoint=_as_optional_str(
                parsed.get("status_endpoint"), _join(base, "status_endpoint")
            ),
            extras=extras,
        )


@dataclass(frozen=True, slots=True)
class Constraints(CanonicalModel):
    _wire_name: ClassVar[str] = "constraints"

    time_limit: str | None = None
    token_budget: int | float | None = None
    tools_allowed: tuple[str, ...] | None = None
    tools_denied: tuple[str, ...] | None = None
    scope: str | None = None
    requires_capabilities: tuple[str, ...] | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "tools_allowed", "tools_denied", "requires_capabilities")

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> Constraints:
        base = cls._wire_name if path is None else path
        parsed, extras = _split_object(data, base, cls)
        return cls(
            time_limit=_as_optional_str(parsed.get("time_limit"), _join(base, "time_limit")),
            token_budget=_as_optional_number(
                parsed.get("token_budget"), _join(base, "token_budget")
            ),
            tools_allowed=_as_optional_str_tuple(
                parsed.get("tools_allowed"), _join(base, "tools_allowed")
            ),
            tools_denied=_as_optional_str_tuple(
                parsed.get("tools_denied"), _join(base, "tools_denied")
            ),
            scope=_as_optional_str(parsed.get("scope"), _join(base, "scope")),
            requires_capabilities=_as_optional_str_tuple(
                parsed.get("requires_capabilities"), _join(base, "requires_capabilities")
            ),
            extras=extras,
        )


@dataclass(frozen=True, slots=True)
class OutputSpec(CanonicalModel):
    """Expected output; ``format`` is required on the wire.

    ``format`` is ``None`` only for a builder that set ``deliver_to`` without a
    format, which the validator then reports at ``output.format``.
    """

    _wire_name: ClassVar[str] = "output"

    format: OutputFormat | str | None = None
    schema: str | None = None
    deliver_to: str | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self)

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> OutputSpec:
        base = cls._wire_name if path is None else path
        parsed, extras = _split_object(data, base, cls)
        return cls(
            format=_as_enum(OutputFormat, _require(parsed, "format", base), _join(base, "format")),
            schema=_as_optional_str(parsed.get("schema"), _join(base, "schema")),
            deliver_to=_as_optional_str(parsed.get("deliver_to"), _join(base, "deliver_to")),
            extras=extras,
        )


@dataclass(frozen=True, slots=True)
class FailurePolicy(CanonicalModel):
    _wire_name: ClassVar[str] = "on_failure"

    action: FailureAction | str
    max_retries: int | float | None = None
    escalate_to: str | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self)

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> FailurePolicy:
        base = cls._wire_name if path is None else path
        parsed, extras = _split_object(data, base, cls)
        return cls(
            action=_as_enum(FailureAction, _require(parsed, "action", base), _join(base, "action")),
            max_retries=_as_optional_number(parsed.get("max_retries"), _join(base, "max_retries")),
            escalate_to=_as_optional_str(parsed.get("escalate_to"), _join(base, "escalate_to")),
            extras=extras,
        )


@dataclass(frozen=True, slots=True)
class TaskHandoff(CanonicalModel):
    """A task one agent delegates to another."""

    _wire_name: ClassVar[str] = ""

    task_id: str
    sender: Sender
    task: TaskSpec
    iap_version: str = IAP_VERSION
    delivery: Delivery | None = None
    constraints: Constraints | None = None
    success_criteria: tuple[str, ...] | None = None
    output: OutputSpec | None = None
    on_failure: FailurePolicy | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    # Wire order differs from constructor order: version first, delivery before task.
    _field_order: ClassVar[tuple[str, ...]] = (
        "iap_version",
        "task_id",
        "sender",
        "delivery",
        "task",
        "constraints",
        "success_criteria",
        "output",
        "on_failure",
    )

    def __post_init__(self) -> None:
        _freeze(self, "success_criteria")

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> TaskHandoff:
        parsed, extras = _split_object(data, "", cls)
        delivery = parsed.get("delivery")
        constraints = parsed.get("constraints")
        output = parsed.get("output")
        on_failure = parsed.get("on_failure")
        return cls(
            iap_version=_as_str(_require(parsed, "iap_version", ""), "iap_version"),
            task_id=_as_str(_require(parsed, "task_id", ""), "task_id"),
            sender=Sender.from_dict(_require(parsed, "sender", "")),
            delivery=None if delivery is None else Delivery.from_dict(delivery),
            task=TaskSpec.from_dict(_require(parsed, "task", "")),
            constraints=None if constraints is None else Constraints.from_dict(constraints),
            success_criteria=_as_optional_str_tuple(
                parsed.get("success_criteria"), "success_criteria"
            ),
            output=None if output is None else OutputSpec.from_dict(output),
            on_failure=None if on_failure is None else FailurePolicy.from_dict(on_failure),
            extras=extras,
        )


@dataclass(frozen=True, slots=True)
class ResultMetadata(CanonicalModel):
    _wire_name: ClassVar[str] = "metadata"

    started_at: str | None = None
    completed_at: str | None = None
    tokens_used: int | float | None = None
    agent_id: str | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self)

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> ResultMetadata:
        base = cls._wire_name if path is None else path
        parsed, extras = _split_object(data, base, cls)
        return cls(
            started_at=_as_optional_str(parsed.get("started_at"), _join(base, "started_at")),
            completed_at=_as_optional_str(parsed.get("completed_at"), _join(base, "completed_at")),
            tokens_used=_as_optional_number(parsed.get("tokens_used"), _join(base, "tokens_used")),
            agent_id=_as_optional_str(parsed.get("agent_id"), _join(base, "agent_id")),
            extras=extras,
        )


@dataclass(frozen=True, slots=True)
class TaskResult(CanonicalModel):
    """Outcome reported back for a task; not subject to the handoff validator."""

    _wire_name: ClassVar[str] = ""

    task_id: str
    status: TaskStatus | str
    result: object = field(default=None, hash=False)
    error: str | None = None
    criteria_met: tuple[str, ...] | None = None
    criteria_unmet: tuple[str, ...] | None = None
    metadata: ResultMetadata | None = None
    extras: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "criteria_met", "criteria_unmet")

    @classmethod
    def from_dict(cls, data: object, path: str | None = None) -> TaskResult:
        parsed, extras = _split_object(data, "", cls)
        metadata = parsed.get("metadata")
        return cls(
            task_id=_as_str(_require(parsed, "task_id", ""), "task_id"),
            status=_as_enum(TaskStatus, _require(parsed, "status", ""), "status"),
            result=parsed.get("result"),
            error=_as_optional_str(parsed.get("error"), "error"),
            criteria_met=_as_optional_str_tuple(parsed.get("criteria_met"), "criteria_met"),
            criteria_unmet=_as_optional_str_tuple(parsed.get("criteria_unmet"), "criteria_unmet"),
            metadata=None if metadata is None else ResultMetadata.from_dict(metadata),
            extras=extras,
        )


# ------------------------
# Decoding helpers
# ------------------------


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _split_object(
    value: object,
    path: str,
    model: type[CanonicalModel],
) -> tuple[dict[str, object], dict[str, object]]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")

    known_names = {item.name for item in fields(cast("type", model))} - {_EXTRAS_FIELD}
    parsed: dict[str, object] = {}
    extras: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        if key in known_names:
            parsed[key] = item
        else:
            extras[key] = item
    return parsed, extras


def _require(parsed: Mapping[str, object], key: str, path: str) -> object:
    value = parsed.get(key)
    if value is None:
        _fail(_join(path, key), "missing required field")
    return value


def _as_str(value: object, path: str) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    return value


def _as_optional_str(value: object, path: str) -> str | None:
    if value is None:
        return None
    return _as_str(value, path)


def _as_optional_number(value: object, path: str) -> int | float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _fail(path, f"expected number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        _fail(path, "must be finite")
    return value


def _as_optional_str_tuple(value: object, path: str) -> tuple[str, ...] | None:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        _fail(path, f"expected array, got {type(value).__name__}")
    return tuple(_as_str(item, f"{path}[{index}]") for index, item in enumerate(value))


def _as_enum(enum_type: type[TEnum], value: object, path: str) -> TEnum:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        _fail(path, f"expected string enum value, got {type(value).__name__}")
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(item.value for item in enum_type)
        _fail(path, f"invalid value {value!r}; expected one of: {allowed}")


# ------------------------
# Serialization helpers
# ------------------------


def to_json_value(value: object, path: str = "") -> JSONValue:
    """Convert models, enums and containers into plain JSON values."""
    if value is None or isinstance(value, bool):
        return cast("JSONValue", value)
    if isinstance(value, Enum):
        raw = value.value
        if not isinstance(raw, str):
            _fail(path, "enum value must be string")
        return raw
    if isinstance(value, (int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            _fail(path, "float values must be finite")
        return value
    if isinstance(value, (list, tuple)):
        return [to_json_value(item, f"{path}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, Mapping):
        out: dict[str, JSONValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                _fail(path, "dict keys must be strings")
            out[key] = to_json_value(item, _join(path, key))
        return out
    if is_dataclass(value) and not isinstance(value, type):
        return _serialize_model(value, path)

    _fail(path, f"cannot serialize value of type {type(value).__name__}")


def _serialize_model(value: object, path: str) -> dict[str, JSONValue]:
    order = getattr(value, "_field_order", None)
    names = (
        tuple(order)
        if order is not None
        else tuple(item.name for item in fields(cast("type", value)) if item.name != _EXTRAS_FIELD)
    )

    out_obj: dict[str, JSONValue] = {}
    for name in names:
        item = getattr(value, name)
        if item is None:
            continue
        out_obj[name] = to_json_value(item, _join(path, name))

    extras = getattr(value, _EXTRAS_FIELD, None) or {}
    for key, item in extras.items():
        if key in out_obj or key in names:
            continue
        out_obj[key] = to_json_value(item, _join(path, key))
    return out_obj


__all__ = [
    "CanonicalModel",
    "Constraints",
    "Delivery",
    "DeliveryMethod",
    "FailureAction",
    "FailurePolicy",
    "JSONScalar",
    "JSONValue",
    "ModelDecodeError",
    "OutputFormat",
    "OutputSpec",
    "ResultMetadata",
    "Sender",
    "TaskHandoff",
    "TaskResult",
    "TaskSpec",
    "TaskStatus",
    "to_json_value",
]
