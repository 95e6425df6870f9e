"""JSON codec for task handoff documents.

Only JSON is accepted. YAML and other formats are rejected with an explicit
message rather than parsed partially.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Final, NoReturn

from inter_ai_protocol.domain.models import (
    CanonicalModel,
    JSONValue,
    ModelDecodeError,
    TaskHandoff,
    to_json_value,
)
from inter_ai_protocol.validation import InvalidTaskError, ValidationIssue, validate

JSON_ONLY_MESSAGE: Final[str] = (
    "Only JSON format is supported in this version. For YAML, use a YAML parser first."
)
_INDENT: Final[int] = 2
_COMPACT_SEPARATORS: Final[tuple[str, str]] = (",", ":")


class ParseError(ValueError):
    """Raised when input text is not syntactically valid JSON."""


def _reject_constant(token: str) -> NoReturn:
    raise ValueError(f"{token} is not a JSON value")


def serialize(doc: CanonicalModel | Mapping[str, object], pretty: bool = True) -> str:
    """Render ``doc`` as JSON in declared field order.

    ``pretty`` indents by two spaces; otherwise no extraneous whitespace is
    emitted. Absent optional fields are omitted rather than written as null.
    """

    payload: JSONValue
    if isinstance(doc, CanonicalModel):
        payload = doc.to_dict()
    else:
        payload = to_json_value(doc, "")

    if pretty:
        return json.dumps(payload, indent=_INDENT, ensure_ascii=False)
    return json.dumps(payload, separators=_COMPACT_SEPARATORS, ensure_ascii=False)


def parse(text: str) -> TaskHandoff:
    """Decode ``text`` as JSON, validate it, and return the typed handoff.

    Raises ``ParseError`` when ``text`` is not JSON and ``InvalidTaskError``
    listing every issue when it is JSON but not a conformant handoff.
    """

    try:
        decoded: object = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError) as exc:
        raise ParseError(JSON_ONLY_MESSAGE) from exc

    issues = validate(decoded)
    if issues:
        raise InvalidTaskError(issues)

    try:
        return TaskHandoff.from_dict(decoded)
    except ModelDecodeError as exc:
        raise InvalidTaskError((ValidationIssue(path=exc.path, message=exc.message),)) from exc


__all__ = ["JSON_ONLY_MESSAGE", "ParseError", "parse", "serialize"]
