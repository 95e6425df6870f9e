"""
inter-ai-protocol — unit tests for config schema

File: tests/unit/config/test_schema.py

Purpose
- Validate defaults and structured issue reporting for the CLI config.

What this test file should cover
- Defaults pass validation.
- Unknown keys, missing keys, wrong types, and bad enum values are all reported.
- Deep merge semantics.
"""

from __future__ import annotations

import pytest

from inter_ai_protocol.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)


def test_defaults_are_valid() -> None:
    result = validate_config(default_config())
    assert result.is_valid
    assert result.config == {
        "output": {"pretty": True},
        "logging": {"level": "WARNING", "format": "text"},
        "defaults": {"agent_id": "cli"},
    }


def test_default_config_returns_independent_copy() -> None:
    config = default_config()
    config["output"]["pretty"] = False
    assert DEFAULT_CONFIG["output"]["pretty"] is True


def test_every_issue_is_reported_with_paths() -> None:
    config = merge_config(
        default_config(),
        {
            "output": {"pretty": "yes", "color": True},
            "logging": {"level": "LOUD", "format": "xml"},
            "defaults": {"agent_id": "  "},
            "extra": 1,
        },
    )

    result = validate_config(config)

    assert not result.is_valid
    assert [(item.path, item.message) for item in result.issues] == [
        ("extra", "unknown field"),
        ("output.color", "unknown field"),
        ("output.pretty", "expected boolean, got str"),
        ("logging.level", "invalid value 'LOUD'; expected one of: DEBUG, ERROR, INFO, WARNING"),
        ("logging.format", "invalid value 'xml'; expected one of: json, text"),
        ("defaults.agent_id", "must not be empty"),
    ]


def test_missing_sections_and_non_object_root() -> None:
    result = validate_config({"output": {"pretty": True}})
    assert [item.path for item in result.issues] == ["defaults", "logging"]

    root = validate_config(["not", "a", "mapping"])
    assert [(item.path, item.message) for item in root.issues] == [
        ("<root>", "expected object, got list")
    ]


def test_log_level_is_case_insensitive() -> None:
    config = merge_config(default_config(), {"logging": {"level": "debug"}})
    assert assert_valid_config(config)["logging"]["level"] == "DEBUG"


def test_optional_defaults_are_kept() -> None:
    config = merge_config(
        default_config(), {"defaults": {"email": "me@agentmail.to", "framework": "crewai"}}
    )
    validated = assert_valid_config(config)
    assert validated["defaults"] == {
        "agent_id": "cli",
        "email": "me@agentmail.to",
        "framework": "crewai",
    }


def test_assert_valid_config_raises_with_all_issues() -> None:
    with pytest.raises(ConfigValidationError, match="output.pretty: expected boolean") as excinfo:
        assert_valid_config(merge_config(default_config(), {"output": {"pretty": 1}}))
    assert len(excinfo.value.issues) == 1


def test_merge_config_is_deep_and_non_mutating() -> None:
    base = {"a": {"b": 1, "c": 2}}
    merged = merge_config(base, {"a": {"c": 3}, "d": 4})
    assert merged == {"a": {"b": 1, "c": 3}, "d": 4}
    assert base == {"a": {"b": 1, "c": 2}}
