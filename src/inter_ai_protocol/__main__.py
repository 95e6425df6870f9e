"""Module entrypoint for ``python -m inter_ai_protocol``."""

from __future__ import annotations

from inter_ai_protocol.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
