# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""CLI interface for semantic-release-confluence.

Runs the ``verify`` and ``publish`` hooks from a pipeline step, taking the
plugin options from command line flags and/or a JSON file.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Context, load_config_file, load_environment
from .errors import EXIT_CONFIG_ERROR, EXIT_SUCCESS, EXIT_UNEXPECTED_ERROR, ReleaseError
from .plugin import publish, verify_conditions


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration.

    Args:
        verbose: If True, set DEBUG level; otherwise INFO level
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def _plugin_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge the options file with command line flags (flags win)."""
    options: Dict[str, Any] = {}
    if args.config:
        options.update(load_config_file(Path(args.config)))

    flags = {
        "baseUrl": args.base_url,
        "documentID": args.document_id,
        "documentPath": args.document_path,
        "attachmentsDir": args.attachments_dir,
    }
    options.update({key: value for key, value in flags.items() if value is not None})
    return options


def run_hook(args: argparse.Namespace) -> int:
    """Handle the 'verify' and 'publish' commands.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1-4 for various error types)
    """
    logger = logging.getLogger(__name__)

    try:
        plugin_config = _plugin_config(args)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load plugin config from {args.config}: {e}")
        return EXIT_CONFIG_ERROR

    cwd = Path(args.cwd).resolve() if args.cwd else Path.cwd()
    context = Context(
        env=load_environment(cwd),
        cwd=cwd,
        logger=logging.getLogger("semantic_release_confluence"),
        dry_run=getattr(args, "dry_run", False),
    )

    try:
        if args.command == "verify":
            verify_conditions(plugin_config, context)
        else:
            result = publish(plugin_config, context)
            if not result.dry_run:
                logger.info(
                    f"Page '{result.state.title}' is now at version {result.state.version}",
                    extra={"space_key": result.state.space, "version": result.state.version},
                )
        return EXIT_SUCCESS

    except ReleaseError as e:
        e.log_error()
        return e.exit_code
    except Exception as e:
        logger.error(f"Unexpected error in {args.command} command: {e}")
        return EXIT_UNEXPECTED_ERROR


def _add_plugin_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="JSON file holding the plugin options")
    parser.add_argument("--base-url", help="Confluence base URL (baseUrl)")
    parser.add_argument("--document-id", help="ID of the page to publish to (documentID)")
    parser.add_argument("--document-path", help="Path to the rendered document (documentPath)")
    parser.add_argument(
        "--attachments-dir", help="Directory whose files are kept as page attachments"
    )
    parser.add_argument("--cwd", help="Base directory for relative paths (defaults to cwd)")


def create_parser() -> argparse.ArgumentParser:
    """Create the command line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="semantic-release-confluence",
        description="Publish a rendered document and its attachments to a Confluence page",
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    verify_parser = subparsers.add_parser(
        "verify", help="Check configuration and that the page is reachable"
    )
    _add_plugin_options(verify_parser)

    publish_parser = subparsers.add_parser(
        "publish", help="Push the document and attachments to Confluence"
    )
    _add_plugin_options(publish_parser)
    publish_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be published without writing"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.command in ("verify", "publish"):
        return run_hook(args)

    if not args.command:
        logger.info("semantic-release-confluence CLI - no command specified")
    parser.print_help(file=sys.stderr)
    return EXIT_UNEXPECTED_ERROR


if __name__ == "__main__":
    sys.exit(main())
