"""Command-line interface router for inter-ai-protocol."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from inter_ai_protocol.builder import BuilderError, TaskBuilder
from inter_ai_protocol.codec import ParseError, parse, serialize
from inter_ai_protocol.config import (
    LOG_FORMATS,
    LOG_LEVELS,
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from inter_ai_protocol.constants import FAILURE_ACTIONS, OUTPUT_FORMATS, TASK_STATUSES
from inter_ai_protocol.domain.ids import generate_task_id
from inter_ai_protocol.factory import create_result
from inter_ai_protocol.main import ExitCode
from inter_ai_protocol.observability import setup_logging
from inter_ai_protocol.ui.render import CLIRenderer, create_renderer
from inter_ai_protocol.validation import InvalidTaskError, ValidationIssue, validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = ExitCode.INVALID_DOCUMENT

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="iap",
        description=(
            "iap - Inter-AI Protocol task handoff tool.\n\n"
            "Common workflows:\n"
            "  iap validate task.json      Check a handoff document\n"
            "  iap new --intent '...'      Build a handoff document\n"
            "  iap result --task-id ID --status complete\n"
            "  iap id                      Print a fresh task id\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./iap.toml if present).",
    )
    common.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Override logging.level from config.",
    )
    common.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Override logging.format from config.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate ------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Validate a JSON task handoff document",
        description=(
            "Validate a task handoff read from FILE (or stdin).\n\n"
            "Exit codes: 0 valid, 1 invalid, 2 unreadable or not JSON.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    validate_parser.add_argument(
        "file",
        nargs="?",
        default="-",
        help="Path to a JSON document, or '-' for stdin (default).",
    )
    validate_parser.add_argument("--json", action="store_true", help="Emit a JSON report.")
    validate_parser.set_defaults(handler=_cmd_validate)

    # new -----------------------------------------------------------------
    new_parser = subparsers.add_parser(
        "new",
        parents=[common],
        help="Build a task handoff document",
        description=(
            "Build a task handoff and print it as JSON.\n\n"
            "Examples:\n"
            "  iap new --intent 'Summarize the report' --from planner\n"
            "  iap new --intent 'Crawl docs' --async-webhook https://example.com/hook\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    new_parser.add_argument("--intent", required=True, help="What the receiver should do.")
    new_parser.add_argument(
        "--from",
        dest="agent_id",
        default=None,
        help="Sender agent id (default: defaults.agent_id from config).",
    )
    new_parser.add_argument("--email", default=None, help="Sender email.")
    new_parser.add_argument("--framework", default=None, help="Sender framework.")
    new_parser.add_argument("--details", default=None)
    new_parser.add_argument("--context", default=None)
    new_parser.add_argument("--context-ref", default=None)
    delivery_group = new_parser.add_mutually_exclusive_group()
    delivery_group.add_argument("--sync", action="store_true", help="Request sync delivery.")
    delivery_group.add_argument(
        "--async-webhook",
        default=None,
        metavar="URL",
        help="Request async delivery to a webhook.",
    )
    delivery_group.add_argument(
        "--email-delivery",
        default=None,
        metavar="ADDR",
        help="Request delivery by email.",
    )
    new_parser.add_argument("--status-endpoint", default=None, help="Async status endpoint.")
    new_parser.add_argument("--time-limit", default=None, help="Time limit such as '30m'.")
    new_parser.add_argument("--token-budget", type=int, default=None)
    new_parser.add_argument("--scope", default=None)
    new_parser.add_argument(
        "--criterion",
        dest="criteria",
        action="append",
        default=None,
        help="Success criterion (repeatable).",
    )
    new_parser.add_argument("--format", dest="output_format", choices=OUTPUT_FORMATS, default=None)
    new_parser.add_argument("--schema", default=None, help="Output schema reference.")
    new_parser.add_argument("--deliver-to", default=None)
    new_parser.add_argument("--on-failure", choices=FAILURE_ACTIONS, default=None)
    new_parser.add_argument("--max-retries", type=int, default=None)
    new_parser.add_argument("--escalate-to", default=None)
    new_parser.add_argument("--task-id", default=None, help="Explicit task id.")
    new_parser.add_argument("--compact", action="store_true", help="Emit compact JSON.")
    new_parser.set_defaults(handler=_cmd_new)

    # result --------------------------------------------------------------
    result_parser = subparsers.add_parser(
        "result",
        parents=[common],
        help="Build a task result document",
    )
    result_parser.add_argument("--task-id", required=True)
    result_parser.add_argument("--status", required=True, choices=TASK_STATUSES)
    result_parser.add_argument("--agent-id", default=None)
    result_parser.add_argument("--error", default=None)
    result_parser.add_argument("--result", dest="result_text", default=None)
    result_parser.add_argument("--met", dest="criteria_met", action="append", default=None)
    result_parser.add_argument("--unmet", dest="criteria_unmet", action="append", default=None)
    result_parser.add_argument("--tokens-used", type=int, default=None)
    result_parser.add_argument("--compact", action="store_true", help="Emit compact JSON.")
    result_parser.set_defaults(handler=_cmd_result)

    # id ------------------------------------------------------------------
    id_parser = subparsers.add_parser("id", parents=[common], help="Print a fresh task id")
    id_parser.set_defaults(handler=_cmd_id)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration",
    )
    config_parser.add_argument("--json", action="store_true", help="Emit compact JSON.")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.USAGE_ERROR)

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_validate(args: argparse.Namespace) -> int:
    _load_effective_config(args)
    source = str(args.file)
    text = _read_source(source)

    issues: tuple[ValidationIssue, ...] = ()
    try:
        parse(text)
    except ParseError as exc:
        logger.debug("input is not JSON", extra={"source": source})
        raise CLIError(str(exc), exit_code=ExitCode.USAGE_ERROR) from exc
    except InvalidTaskError as exc:
        issues = exc.issues

    logger.info("validated document", extra={"source": source, "issue_count": len(issues)})

    if args.json:
        _emit_json(
            {
                "valid": not issues,
                "issues": [{"path": item.path, "message": item.message} for item in issues],
            }
        )
    else:
        renderer = _get_renderer(args)
        if not issues:
            renderer.ok("valid")
        else:
            renderer.fail(f"invalid ({len(issues)} issue{'s' if len(issues) != 1 else ''})")
            renderer.items([_render_issue(item) for item in issues])

    return int(ExitCode.SUCCESS if not issues else ExitCode.INVALID_DOCUMENT)


def _cmd_new(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.compact:
        overrides["output.pretty"] = False
    config = _load_effective_config(args, overrides)
    defaults = _section(config, "defaults")

    builder = TaskBuilder()
    agent_id = args.agent_id if args.agent_id is not None else defaults.get("agent_id")
    if isinstance(agent_id, str):
        builder.from_agent(
            agent_id,
            email=_first_str(args.email, defaults.get("email")),
            framework=_first_str(args.framework, defaults.get("framework")),
        )
    builder.intent(args.intent)
    if args.details is not None:
        builder.details(args.details)
    if args.context is not None:
        builder.context(args.context)
    if args.context_ref is not None:
        builder.context_ref(args.context_ref)

    if args.sync:
        builder.sync_delivery()
    elif args.async_webhook is not None:
        builder.async_delivery(args.async_webhook, status_endpoint=args.status_endpoint)
    elif args.email_delivery is not None:
        builder.email_delivery(args.email_delivery)

    if args.time_limit is not None:
        builder.time_limit(args.time_limit)
    if args.token_budget is not None:
        builder.token_budget(args.token_budget)
    if args.scope is not None:
        builder.scope(args.scope)
    for criterion in args.criteria or ():
        builder.add_criterion(criterion)
    if args.output_format is not None:
        builder.output_format(args.output_format, schema=args.schema)
    if args.deliver_to is not None:
        builder.deliver_to(args.deliver_to)
    if args.on_failure is not None:
        builder.on_failure(
            args.on_failure,
            max_retries=args.max_retries,
            escalate_to=args.escalate_to,
        )
    if args.task_id is not None:
        builder.task_id(args.task_id)

    try:
        handoff = builder.build()
    except BuilderError as exc:
        raise CLIError(str(exc), exit_code=ExitCode.USAGE_ERROR) from exc

    print(serialize(handoff, pretty=_pretty(config)))

    issues = validate(handoff)
    if issues:
        logger.warning(
            "built task is not conformant",
            extra={"task_id": handoff.task_id, "issues": [item.render() for item in issues]},
        )
        return int(ExitCode.INVALID_DOCUMENT)
    logger.info("built task", extra={"task_id": handoff.task_id})
    return int(ExitCode.SUCCESS)


def _cmd_result(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.compact:
        overrides["output.pretty"] = False
    config = _load_effective_config(args, overrides)

    document = create_result(
        task_id=args.task_id,
        status=args.status,
        result=args.result_text,
        error=args.error,
        criteria_met=args.criteria_met,
        criteria_unmet=args.criteria_unmet,
        agent_id=args.agent_id,
        tokens_used=args.tokens_used,
    )
    print(serialize(document, pretty=_pretty(config)))
    return int(ExitCode.SUCCESS)


def _cmd_id(args: argparse.Namespace) -> int:
    _load_effective_config(args)
    print(generate_task_id())
    return int(ExitCode.SUCCESS)


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    if args.json:
        print(dump_effective_config(config))
    else:
        print(json.dumps(config, indent=2, sort_keys=True, ensure_ascii=False))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=bool(getattr(args, "no_color", False)))


def _load_effective_config(
    args: argparse.Namespace,
    overrides: Mapping[str, object] | None = None,
) -> dict[str, object]:
    """Load config, apply flag overrides, and configure logging from it."""

    cli_overrides: dict[str, object] = dict(overrides or {})
    if getattr(args, "log_level", None) is not None:
        cli_overrides["logging.level"] = args.log_level
    if getattr(args, "log_format", None) is not None:
        cli_overrides["logging.format"] = args.log_format

    try:
        config = load_config(getattr(args, "config_path", None), cli_overrides=cli_overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=ExitCode.USAGE_ERROR) from exc

    logging_section = _section(config, "logging")
    setup_logging(
        str(logging_section.get("level", "WARNING")),
        "json" if logging_section.get("format") == "json" else "text",
    )
    logger.debug("config loaded", extra={"command": getattr(args, "command", None)})
    return config


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CLIError(f"unable to read {source}: {exc}", exit_code=ExitCode.USAGE_ERROR) from exc


def _render_issue(issue: ValidationIssue) -> str:
    return f"{issue.path or '<root>'}: {issue.message}"


def _section(config: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = config.get(key)
    if isinstance(value, Mapping):
        return value
    return {}


def _pretty(config: Mapping[str, object]) -> bool:
    return _section(config, "output").get("pretty") is not False


def _first_str(*candidates: object) -> str | None:
    for candidate in candidates:
        if isinstance(candidate, str):
            return candidate
    return None


__all__ = ["CLIError", "build_parser", "run_cli"]
