"""
statrace App entrypoint.

This module provides the CLI entrypoint to launch the Streamlit UI. It defers
all UI composition to the app.ui package and exists solely to start Streamlit
programmatically or render directly when already running under Streamlit.

Usage:
    - Python execution (hands process to Streamlit):
        python -m app.main --data data-table.csv --interval-ms 500

    - Streamlit direct:
        streamlit run src/app/main.py -- --data data-table.csv
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path

from app.ui import streamlit_app


def _parser(*, add_help: bool = True) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="statrace Streamlit App", add_help=add_help)
    parser.add_argument(
        "--data",
        default=None,
        help="CSV path or URL (defaults to STATRACE_DATA_PATH / statrace.toml / data-table.csv).",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=None,
        help="Initial milliseconds per animation tick.",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Console entrypoint that launches Streamlit with the statrace UI.

    If already executing within a Streamlit server (environment variable
    STREAMLIT_SERVER_PORT is set), this function renders the app directly.
    Otherwise, it execs "python -m streamlit run <this_module>" to leverage
    Streamlit's reloader and argument parsing, passing through any supported
    options after "--".

    Args:
        argv (list[str] | None): Optional list of CLI arguments. If None,
            sys.argv[1:] is used.

    Examples:
        python -m app.main --data data-table.csv
        streamlit run src/app/main.py -- --data data-table.csv
    """
    args = list(sys.argv[1:] if argv is None else argv)
    ns = _parser().parse_args(args)

    # If invoked within Streamlit, just render
    if os.environ.get("STREAMLIT_SERVER_PORT"):
        logging.basicConfig(level=ns.log_level.upper())
        streamlit_app(default_data=ns.data, default_interval_ms=ns.interval_ms)
        return

    # Otherwise, exec streamlit run on this module to take over the process
    app_path = Path(__file__).resolve()
    cmd = [sys.executable, "-m", "streamlit", "run", str(app_path)]

    passthrough: list[str] = []
    if ns.data:
        passthrough += ["--data", ns.data]
    if ns.interval_ms is not None:
        passthrough += ["--interval-ms", str(int(ns.interval_ms))]
    if ns.log_level:
        passthrough += ["--log-level", ns.log_level]
    if passthrough:
        cmd += ["--"] + passthrough

    try:
        os.execv(sys.executable, cmd)
    except OSError:
        subprocess.run(cmd, check=False)


if __name__ == "__main__":
    # Support: --data, --interval-ms, --log-level after '--' when using `streamlit run`
    try:
        ns, _ = _parser(add_help=False).parse_known_args(sys.argv[1:])
    except SystemExit:
        # Fallback to no-arg render
        streamlit_app()
    else:
        logging.basicConfig(level=ns.log_level.upper())
        streamlit_app(default_data=ns.data, default_interval_ms=ns.interval_ms)
