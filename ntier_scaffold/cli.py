"""Command-line entry point: read the schema and scaffold the N-tier layers."""
import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from ntier_scaffold.core.config import load_settings
from ntier_scaffold.core.errors import ScaffoldError
from ntier_scaffold.core.logging import configure_logging
from ntier_scaffold.generators.ntier_gen.generator import generate

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_CONFIG = 2


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ntier-scaffold",
        description="Generate entity, DAL, service, controller and model layers from a database schema",
    )
    parser.add_argument("--project", help="Project/namespace prefix (PROJECT_NAME)")
    parser.add_argument("--out", help="Root directory of the target solution (OUTPUT_DIR)")
    parser.add_argument(
        "--layers",
        help="Comma-separated layers to generate, e.g. entity,abstract_dal,composition (ENABLED_LAYERS)",
    )
    parser.add_argument(
        "--no-register",
        action="store_true",
        help="Do not patch the composition root with DI registrations",
    )
    parser.add_argument("--no-async", action="store_true", help="Omit async query members and endpoints")
    parser.add_argument("--no-paginate", action="store_true", help="Omit the paginate endpoint")
    parser.add_argument("--dry-run", action="store_true", help="Report what would be written without writing")
    parser.add_argument("--log-level", help="Logging level (LOG_LEVEL)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)

    try:
        settings = load_settings(
            project_name=args.project,
            output_dir=args.out,
            enabled_layers=args.layers,
            register_dependencies=False if args.no_register else None,
            include_async_queries=False if args.no_async else None,
            include_paginate_endpoint=False if args.no_paginate else None,
            log_level=args.log_level,
        )
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return EXIT_BAD_CONFIG

    configure_logging(settings.log_level)

    try:
        report = generate(settings, dry_run=args.dry_run)
    except ScaffoldError as e:
        log.error("Generation aborted: %s", e)
        return EXIT_FAILED

    prefix = "[dry-run] " if args.dry_run else ""
    print(f"{prefix}{report.summary()}")
    return EXIT_OK


def main_entry() -> None:
    sys.exit(main())
