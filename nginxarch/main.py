#!/usr/bin/env python3
"""
nginxarch - Main Entry Points

This is the thin orchestration layer that:
1. Configures logging
2. Loads configuration
3. Checks for the external binaries the tool needs
4. Hands the command line to the dispatcher

All behaviour lives in the modules.
"""

import logging
import sys
from typing import Mapping, Optional, Sequence

from rich.console import Console

from nginxarch.config.provider import NginxArchConfig, get_config_provider, load_config
from nginxarch.errors import ConfigError
from nginxarch.logging_config import configure_logging
from nginxarch.modules.dispatch import NGINX_BENCH, NGINX_UTIL, ClusterActions, Dispatcher, ToolSpec
from nginxarch.modules.preflight import find_missing, report_missing

logger = logging.getLogger("nginxarch.main")


def required_binaries(tool: ToolSpec, config: NginxArchConfig) -> dict:
    """Map each external tool the command needs to its configured binary."""
    binaries = {
        "kubectl": config.cluster.kubectl_bin,
        "wrk": config.benchmark.wrk_bin,
    }
    return {name: binaries[name] for name in tool.required_tools}


def run_tool(
    tool: ToolSpec,
    argv: Sequence[str],
    environ: Optional[Mapping[str, str]] = None,
    console: Optional[Console] = None,
) -> int:
    """Run one tool invocation and return its exit status."""
    console = console or Console(soft_wrap=True)

    try:
        config = load_config(get_config_provider(environ))
    except ConfigError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 1

    missing = find_missing(required_binaries(tool, config))
    if missing:
        report_missing(missing, console)
        return 1

    actions = ClusterActions.from_config(config, console)
    return Dispatcher(tool, actions, console).dispatch(argv)


def _main(tool: ToolSpec) -> None:
    configure_logging()
    try:
        code = run_tool(tool, sys.argv[1:])
    except KeyboardInterrupt:
        logger.info(f"{tool.name} interrupted")
        code = 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        code = 1
    sys.exit(code)


def util_main() -> None:
    """Entry point for nginx-util."""
    _main(NGINX_UTIL)


def bench_main() -> None:
    """Entry point for nginx-bench."""
    _main(NGINX_BENCH)


if __name__ == "__main__":
    util_main()
