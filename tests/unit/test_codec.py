"""
inter-ai-protocol — unit tests for the JSON codec

File: tests/unit/test_codec.py

Purpose
- Validate serialize/parse behavior, error classification, and the round-trip law.

What this test file should cover
- Pretty vs compact output.
- ``ParseError`` for non-JSON input, ``InvalidTaskError`` for schema violations.
- Property-based round trip over generated conformant handoffs.
"""

from __future__ import annotations

import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from inter_ai_protocol import (
    JSON_ONLY_MESSAGE,
    Constraints,
    Delivery,
    DeliveryMethod,
    FailureAction,
    FailurePolicy,
    InvalidTaskError,
    OutputFormat,
    OutputSpec,
    ParseError,
    Sender,
    TaskHandoff,
    TaskSpec,
    parse,
    serialize,
)

MINIMAL = TaskHandoff(task_id="task-1", sender=Sender(agent_id="a"), task=TaskSpec(intent="i"))


def test_pretty_serialization_uses_two_space_indent() -> None:
    text = serialize(MINIMAL)
    assert text.splitlines()[1] == '  "iap_version": "0.2",'
    assert json.loads(text) == MINIMAL.to_dict()


def test_compact_serialization_has_no_whitespace() -> None:
    text = serialize(MINIMAL, pretty=False)
    assert text == (
        '{"iap_version":"0.2","task_id":"task-1","sender":{"agent_id":"a"},"task":{"intent":"i"}}'
    )


def test_serialize_accepts_plain_mappings() -> None:
    assert serialize({"b": 1, "a": [True, None]}, pretty=False) == '{"b":1,"a":[true,null]}'


def test_serialize_keeps_non_ascii() -> None:
    handoff = TaskHandoff(task_id="t", sender=Sender(agent_id="a"), task=TaskSpec(intent="résumé"))
    assert "résumé" in serialize(handoff, pretty=False)


def test_parse_returns_typed_handoff() -> None:
    parsed = parse(serialize(MINIMAL))
    assert parsed == MINIMAL


@pytest.mark.parametrize("text", ["", "iap_version: '0.2'", "{'a': 1}", "[1,"])
def test_parse_rejects_non_json(text: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse(text)
    assert str(excinfo.value) == JSON_ONLY_MESSAGE
    assert JSON_ONLY_MESSAGE == (
        "Only JSON format is supported in this version. For YAML, use a YAML parser first."
    )


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_parse_rejects_non_finite_number_tokens(token: str) -> None:
    text = serialize(MINIMAL, pretty=False)[:-1] + f',"x-score":{token}}}'
    with pytest.raises(ParseError) as excinfo:
        parse(text)
    assert str(excinfo.value) == JSON_ONLY_MESSAGE


def test_parse_rejects_excessive_nesting() -> None:
    depth = 100_000
    with pytest.raises(ParseError) as excinfo:
        parse("[" * depth + "]" * depth)
    assert str(excinfo.value) == JSON_ONLY_MESSAGE
    assert isinstance(excinfo.value.__cause__, RecursionError)


def test_parse_rejects_invalid_documents_with_every_issue() -> None:
    with pytest.raises(InvalidTaskError) as excinfo:
        parse('{"iap_version": "0.1", "task_id": ""}')

    assert str(excinfo.value) == (
        "Invalid IAP task: iap_version: Must be \"0.2\", task_id: Required string, "
        "sender: Required object, task: Required object"
    )
    assert [item.path for item in excinfo.value.issues] == [
        "iap_version",
        "task_id",
        "sender",
        "task",
    ]


def test_parse_rejects_non_object_json() -> None:
    with pytest.raises(InvalidTaskError, match="Task must be an object"):
        parse("[]")


def test_parse_reports_structural_problems_in_unchecked_sections() -> None:
    document = MINIMAL.to_dict()
    document["constraints"] = {"token_budget": "lots"}

    with pytest.raises(InvalidTaskError) as excinfo:
        parse(json.dumps(document))

    assert excinfo.value.issues[0].path == "constraints.token_budget"


def test_parse_keeps_unknown_fields() -> None:
    document = {**MINIMAL.to_dict(), "x-priority": "high"}
    parsed = parse(json.dumps(document))
    assert parsed.extras == {"x-priority": "high"}
    assert json.loads(serialize(parsed)) == document


_text = st.text(min_size=1, max_size=12)
_optional_text = st.none() | _text


@st.composite
def handoffs(draw: st.DrawFn) -> TaskHandoff:
    method = draw(st.sampled_from(list(DeliveryMethod)) | st.none())
    delivery = None
    if method is DeliveryMethod.SYNC:
        delivery = Delivery(method=method)
    elif method is DeliveryMethod.ASYNC:
        delivery = Delivery(method=method, webhook=draw(_text))
    elif method is DeliveryMethod.EMAIL:
        delivery = Delivery(method=method, email=draw(_text))

    output_format = draw(st.sampled_from(list(OutputFormat)) | st.none())
    action = draw(st.sampled_from(list(FailureAction)) | st.none())
    return TaskHandoff(
        task_id=draw(_text),
        sender=Sender(agent_id=draw(_text), email=draw(_optional_text)),
        task=TaskSpec(intent=draw(_text), details=draw(_optional_text)),
        delivery=delivery,
        constraints=draw(
            st.none()
            | st.builds(
                Constraints,
                time_limit=_optional_text,
                token_budget=st.none() | st.integers(min_value=0, max_value=10**9),
                tools_allowed=st.none() | st.lists(_text, max_size=3).map(tuple),
            )
        ),
        success_criteria=draw(st.none() | st.lists(_text, max_size=3).map(tuple)),
        output=None if output_format is None else OutputSpec(format=output_format),
        on_failure=None if action is None else FailurePolicy(action=action),
    )


@settings(max_examples=100, deadline=None)
@given(handoff=handoffs(), pretty=st.booleans())
def test_round_trip_law(handoff: TaskHandoff, pretty: bool) -> None:
    assert parse(serialize(handoff, pretty=pretty)) == handoff
