"""Command-line surface for inter-ai-protocol: argparse router and output rendering."""

from inter_ai_protocol.ui.cli import CLIError, build_parser, run_cli
from inter_ai_protocol.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIError", "CLIRenderer", "build_parser", "create_renderer", "run_cli"]
