"""
lazycloud command line entry point.

Usage:
    python -m lazycloud [--context NAME] [--service ID] [--config PATH] [--log-level LEVEL]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from lazycloud import __version__
from lazycloud.config import load_config
from lazycloud.constants import ExitCode
from lazycloud.contexts import load_contexts
from lazycloud.exceptions import ConfigError
from lazycloud.logging_config import setup_logging
from lazycloud.providers import build_registry

logger = logging.getLogger("lazycloud")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazycloud",
        description="Terminal control plane for cloud resources.",
    )
    parser.add_argument("--context", metavar="NAME", help="open this context on start")
    parser.add_argument(
        "--service",
        metavar="ID",
        help="open this service on start, e.g. gcp:secret-manager (needs --context)",
    )
    parser.add_argument("--config", metavar="PATH", type=Path, help="config file to use")
    parser.add_argument("--log-level", metavar="LEVEL", help="override the configured log level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.service and not args.context:
        print("--service requires --context", file=sys.stderr)
        return ExitCode.ERROR

    try:
        config = load_config(args.config, required=args.config is not None)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return ExitCode.CONFIG_ERROR

    setup_logging(args.log_level or config.logging.level, config.log_path)
    logger.info("Starting lazycloud %s", __version__)

    contexts = load_contexts(config)
    logger.info("Loaded %d contexts", len(contexts))
    registry = build_registry()

    from lazycloud.app import run

    run(config, registry, contexts, context_name=args.context, service=args.service)
    return ExitCode.SUCCESS


if __name__ == "__main__":
    sys.exit(main())
