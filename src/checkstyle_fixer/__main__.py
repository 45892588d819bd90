"""Entry point for running checkstyle-fixer.

This module provides the command-line entry point. It handles:
- Configuration loading
- Logging setup with secret sanitization
- Obtaining build output (running Gradle, or reading a file / stdin)
- Report-only mode, health check, and the fix run itself

Fix failures never change the exit status: a run that attempted every
diagnostic exits 0 even if none could be fixed.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from checkstyle_fixer._version import __version__

if TYPE_CHECKING:
    from checkstyle_fixer.config.schema import FixerConfig

log = structlog.get_logger()

CHECK_REPORT_HEADER = "----- Checkstyle Errors ({count}) -----"


def setup_logging(debug: bool = False, log_format: str = "console") -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
    """
    from checkstyle_fixer.utils.logging import LogFormat, LogLevel, configure_logging

    configure_logging(
        level=LogLevel.DEBUG if debug else LogLevel.INFO,
        log_format=LogFormat(log_format.lower()),
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="checkstyle-fixer",
        description="Fix Checkstyle violations reported by Gradle using a local Ollama model",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: built-in defaults)",
    )

    parser.add_argument(
        "-i",
        "--input",
        default=None,
        help="Read build output from this file ('-' for stdin) instead of running the build",
    )

    parser.add_argument(
        "-C",
        "--working-dir",
        type=Path,
        default=None,
        help="Project directory to build and resolve relative paths in",
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="List Checkstyle errors and exit without fixing",
    )

    parser.add_argument(
        "--show-context",
        action="store_true",
        help="With --check, print the source lines around each diagnostic",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Request fixes but do not write them to disk",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Check the generation service and model, then exit",
    )

    parser.add_argument(
        "--wait-for-service",
        type=int,
        default=0,
        metavar="N",
        help="Poll the generation service up to N times before fixing",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default=None,
        help="Log output format (default: console, or the config file setting)",
    )

    return parser.parse_args(argv)


def read_input(source: str) -> str:
    """Read build output from a file path, or stdin for ``-``."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def print_check_report(output: str, args: argparse.Namespace, config: "FixerConfig") -> None:
    """Print the marker lines found in the build output.

    Args:
        output: Raw build output
        args: Parsed CLI arguments
        config: Loaded FixerConfig
    """
    from checkstyle_fixer.core.diagnostic_parser import DiagnosticParser
    from checkstyle_fixer.core.file_context import FileContextLoader
    from checkstyle_fixer.utils.async_helpers import SourceFileNotFoundError

    parser = DiagnosticParser(config.extraction.marker, config.extraction.extension)
    lines = parser.error_lines(output)

    print(CHECK_REPORT_HEADER.format(count=len(lines)))
    for line in lines:
        print(line)

    if not args.show_context:
        return

    loader = FileContextLoader(base_dir=config.build.working_dir)
    for diagnostic in parser.extract(output):
        print(f"\n{diagnostic.location} [{diagnostic.rule}]")
        try:
            window = loader.read_window(
                diagnostic.file, diagnostic.line, config.fixing.context_lines
            )
        except (SourceFileNotFoundError, OSError, UnicodeDecodeError) as e:
            print(f"  ({e})")
            continue
        for number, text in enumerate(window.content.splitlines(), start=window.start_line):
            marker = ">" if number == window.highlight_line else " "
            print(f"{marker}{number:5d} | {text}")


async def run_fixer(args: argparse.Namespace) -> int:
    """Run checkstyle-fixer.

    Args:
        args: Parsed CLI arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    from checkstyle_fixer.adapters.llm.ollama import OllamaAdapter
    from checkstyle_fixer.config.loader import load_config
    from checkstyle_fixer.core.diagnostic_parser import DiagnosticParser
    from checkstyle_fixer.core.file_context import FileContextLoader
    from checkstyle_fixer.core.fixer import FixApplicator
    from checkstyle_fixer.utils.async_helpers import BuildToolError, FixerError
    from checkstyle_fixer.utils.logging import LogEventNames, configure_logging

    log.info(
        "starting_checkstyle_fixer",
        version=__version__,
        config_path=str(args.config) if args.config else None,
    )

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(args.config), error=str(e))
        return 1
    except (ValueError, ValidationError) as e:
        log.error("configuration_invalid", error=str(e))
        return 1

    if args.working_dir is not None:
        config.build.working_dir = args.working_dir

    # Reconfigure logging from config file settings; CLI --debug still wins
    configure_logging(
        level="DEBUG" if args.debug else config.logging.level,
        log_format=args.format or config.logging.format,
        file_path=config.logging.file.path,
        file_enabled=config.logging.file.enabled,
    )

    async with OllamaAdapter(config.ollama) as service:
        if args.health_check:
            from checkstyle_fixer.utils.health import HealthChecker

            report = await HealthChecker(config, service).run_all_checks()
            if report.healthy:
                log.info("health_check_passed", checks=report.to_dict()["checks"])
                return 0
            log.error("health_check_failed", checks=report.to_dict()["checks"])
            return 1

        try:
            output = await obtain_build_output(args, config)
        except (OSError, BuildToolError) as e:
            log.error(LogEventNames.BUILD_ERROR, error=str(e))
            return 1

        if args.check:
            print_check_report(output, args, config)
            return 0

        parser = DiagnosticParser(config.extraction.marker, config.extraction.extension)
        diagnostics = parser.extract(output)
        if not diagnostics:
            log.info(LogEventNames.RUN_NOTHING_TO_FIX)
            return 0

        if args.wait_for_service > 0:
            try:
                await service.wait_until_ready(args.wait_for_service)
            except FixerError as e:
                log.error("service_never_ready", error=str(e))
                return 1

        loader = FileContextLoader(
            base_dir=config.build.working_dir,
            atomic_writes=config.fixing.atomic_writes,
        )
        applicator = FixApplicator(service, loader, dry_run=args.dry_run)
        summary = await applicator.run(diagnostics)

        for outcome in summary.failures:
            log.warning(
                "unfixed_diagnostic",
                location=outcome.diagnostic.location,
                rule=outcome.diagnostic.rule,
                status=outcome.status.value,
            )

    return 0


async def obtain_build_output(args: argparse.Namespace, config: "FixerConfig") -> str:
    """Return build output from ``--input`` or by running the build command."""
    if args.input is not None:
        return read_input(args.input)

    from checkstyle_fixer.utils.safe_subprocess import SafeBuildRunner

    runner = SafeBuildRunner(
        config.build.command,
        working_dir=config.build.working_dir,
        timeout=config.build.timeout,
    )
    result = await runner.run()
    return result.output


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_format=args.format or "console")

    try:
        return asyncio.run(run_fixer(args))
    except KeyboardInterrupt:
        log.info("interrupted")
        return 130
    except Exception as e:
        log.exception("fatal_error", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
