#!/usr/bin/env python3
"""Command-line interface for srcexport.

This module provides the CLI for exporting a source tree:
- Argument parsing and validation
- Settings loading (defaults, settings file, environment, flags)
- Logging setup (console, optional log file)
- Summary output and exit codes

Example:
    >>> from srcexport.cli import parse_arguments
    >>> args = parse_arguments(["/work/MyApp", "/release/MyApp"])
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from srcexport.core.config import ConfigError, ConfigManager, ConfigSource
from srcexport.core.constants import SRCEXPORT_VERSION, ConfigKey
from srcexport.core.errors import ExportError
from srcexport.core.logging import Logger, LoggerExportLog, LogLevel
from srcexport.core.settings import Settings
from srcexport.exporter import Exporter, ExportResult

DESCRIPTION = "srcexport - Export a clean copy of a source tree"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If validation fails
    """
    parser = argparse.ArgumentParser(
        prog="srcexport",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export with the default settings
  srcexport ./MyApp ../release/MyApp

  # Export with a settings file
  srcexport ./MyApp ../release/MyApp export.yaml

  # Rename the product while exporting
  srcexport ./Acme ../release/Contoso --replace Acme=Contoso

  # Show the effective settings
  srcexport --config export.yaml --dump-config
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {SRCEXPORT_VERSION}",
    )

    parser.add_argument("source", nargs="?", help="Source directory")
    parser.add_argument("destination", nargs="?", help="Destination directory")
    parser.add_argument(
        "settings_file",
        nargs="?",
        metavar="config",
        help="Settings file (YAML format)",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Settings file path (YAML format)",
    )

    # Export options
    export_group = parser.add_argument_group("export options")

    export_group.add_argument(
        "--no-hash",
        action="store_true",
        help="Do not verify copied files by hash",
    )

    export_group.add_argument(
        "--keep-scm-binding",
        action="store_true",
        help="Keep source-control bindings in solution and project files",
    )

    export_group.add_argument(
        "--exclude-generated",
        action="store_true",
        help="Exclude files produced by code generators",
    )

    export_group.add_argument(
        "--replace",
        metavar="SEARCH=REPLACEMENT",
        action="append",
        dest="replacements",
        help="Replace text in paths and text files (can be specified multiple times)",
    )

    export_group.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective settings as YAML and exit",
    )

    # Logging options
    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (include/exclude decisions, hash checks)",
    )

    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write the log to a rotating file",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    if args.settings_file and args.config:
        raise CLIError("Specify the settings file either positionally or with --config, not both")

    if args.settings_file:
        args.config = args.settings_file

    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Settings file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Settings path is not a file: {args.config}")

    for item in args.replacements or []:
        if "=" not in item or not item.split("=", 1)[0]:
            raise CLIError(f"Invalid replacement (expected SEARCH=REPLACEMENT): {item}")

    if args.dump_config:
        return

    if not args.source or not args.destination:
        raise CLIError(
            "Both SOURCE and DESTINATION must be specified\n" "Use --help for usage information"
        )

    if not Path(args.source).exists():
        raise CLIError(f"Source does not exist: {args.source}")


def build_config(args: argparse.Namespace) -> ConfigManager:
    """
    Build the layered settings from arguments.

    Flags override the settings file and the environment. Replacements given
    on the command line are appended to the configured ones.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration manager holding every layer
    """
    config = ConfigManager(args.config)

    if args.no_hash:
        config.set(ConfigKey.COMPUTE_HASH, False, ConfigSource.CLI_ARGS)

    if args.keep_scm_binding:
        config.set(ConfigKey.REMOVE_SCM_BINDING, False, ConfigSource.CLI_ARGS)

    if args.exclude_generated:
        config.set(ConfigKey.EXCLUDE_GENERATED_FILES, True, ConfigSource.CLI_ARGS)

    if args.replacements:
        replacements = list(config.get(ConfigKey.REPLACEMENTS) or [])
        for item in args.replacements:
            search, replacement = item.split("=", 1)
            replacements.append(
                {
                    ConfigKey.REPLACEMENT_SEARCH: search,
                    ConfigKey.REPLACEMENT_REPLACEMENT: replacement,
                }
            )
        config.set(ConfigKey.REPLACEMENTS, replacements, ConfigSource.CLI_ARGS)

    return config


def setup_logging(args: argparse.Namespace) -> Logger:
    """
    Setup logging based on arguments.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configured logger instance
    """
    level = LogLevel.DEBUG if args.debug else LogLevel.INFO
    logger = Logger("srcexport", level=level)

    if args.log_file:
        logger.add_handler(logger.create_file_handler(args.log_file))

    return logger


def run_export(args: argparse.Namespace, settings: Settings, logger: Logger) -> ExportResult:
    """
    Run the export described by the arguments.

    Args:
        args: Parsed arguments namespace
        settings: Effective settings
        logger: Logger receiving export events

    Returns:
        Export counts
    """
    exporter = Exporter(args.source, settings, log=LoggerExportLog(logger))
    with logger.add_context(source=exporter.source_root):
        return exporter.export(args.destination)


def print_summary(result: ExportResult) -> None:
    """Print the export counts."""
    print(f"Directories: {result.directories}")
    print(f"Files: {result.files}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    try:
        args = parse_arguments(argv)

        config = build_config(args)

        if args.dump_config:
            print(config.dump(), end="")
            return 0

        settings = config.to_settings()
        logger = setup_logging(args)

        result = run_export(args, settings, logger)
        print_summary(result)
        return 0

    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ConfigError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 1

    except ExportError as e:
        print(f"Export failed: {e.message}", file=sys.stderr)
        return 1

    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
