"""Command-line interface for pytnum.
Provides three commands:
1. Precision comparison: pytnum compare
2. Soundness refutation: pytnum refute
3. Config scaffolding: pytnum init
Exit codes: 0 for a clean run, 1 when incomparable pairs or a
counterexample were found, 2 for usage or configuration errors.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pytnum import __version__
from pytnum.analysis.precision import PrecisionComparator
from pytnum.analysis.refuter import SoundnessRefuter
from pytnum.config import PyTnumConfig, init_config, load_config
from pytnum.core.exceptions import ConfigError
from pytnum.core.solver import Verdict
from pytnum.logging import LogLevel, configure_logging, install_trace_hook
from pytnum.reporting.formatters import format_report

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Configuration file (default: nearest pytnum.toml)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default=None,
        help="Output format (default: text)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-vvv also traces the arithmetic)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="pytnum",
        description="pytnum - tristate number domain for BPF-style verifiers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare fast_divide and sdiv precision on a small bound
  pytnum compare --max-value 255 --divisor-max 255
  # Spread the comparison over 8 processes
  pytnum compare --workers 8
  # Ask Z3 for a fast_divide counterexample
  pytnum refute --dividend-max 128 --divisor-max 128
  # Check the 32-bit divider constants with symbolic dividends
  pytnum refute --width 32 --symbolic
  # Write a default configuration file
  pytnum init
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"pytnum {__version__}",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    compare_parser = subparsers.add_parser(
        "compare",
        help="Compare fast_divide and sdiv precision exhaustively",
        description="Classify the lattice relation of fast_divide and sdiv results",
    )
    compare_parser.add_argument("--max-value", type=int, help="Largest dividend value and mask")
    compare_parser.add_argument("--divisor-min", type=int, help="Smallest constant divisor")
    compare_parser.add_argument("--divisor-max", type=int, help="Largest constant divisor")
    compare_parser.add_argument("--workers", type=int, help="Worker processes (1 runs inline)")
    compare_parser.add_argument("--chunk-size", type=int, help="Dividend values per work item")
    compare_parser.add_argument(
        "--samples", type=int, help="Incomparable pairs to report (default: 10)"
    )
    _add_common_arguments(compare_parser)
    refute_parser = subparsers.add_parser(
        "refute",
        help="Search for fast_divide soundness counterexamples with Z3",
        description="Ask Z3 for a quotient outside the tnum fast_divide reports",
    )
    refute_parser.add_argument("--dividend-min", type=int, help="Smallest dividend")
    refute_parser.add_argument("--dividend-max", type=int, help="Largest dividend")
    refute_parser.add_argument("--divisor-min", type=int, help="Smallest divisor")
    refute_parser.add_argument("--divisor-max", type=int, help="Largest divisor")
    refute_parser.add_argument("--timeout-ms", type=int, help="Solver timeout in milliseconds")
    refute_parser.add_argument(
        "--width", type=int, choices=[32, 64], help="Divider width (default: 64)"
    )
    refute_parser.add_argument(
        "--symbolic",
        action="store_true",
        default=None,
        help="Let the dividend range over non-constant tnums",
    )
    refute_parser.add_argument(
        "--mask-max", type=int, help="Largest dividend mask with --symbolic"
    )
    _add_common_arguments(refute_parser)
    init_parser = subparsers.add_parser(
        "init",
        help="Write a default pytnum.toml",
        description="Create pytnum.toml with the default settings",
    )
    init_parser.add_argument(
        "directory",
        type=Path,
        nargs="?",
        default=None,
        help="Target directory (default: current)",
    )
    return parser


def _override(section: object, **values: object) -> None:
    for key, value in values.items():
        if value is not None:
            setattr(section, key, value)


def _prepare(args) -> PyTnumConfig:
    """Load the configuration, apply command-line overrides and set up logging."""
    config = load_config(args.config)
    _override(
        config.output,
        format=args.format,
        color=False if args.no_color else None,
        verbose=True if args.verbose else None,
    )
    if args.verbose >= 3:
        level = LogLevel.TRACE
    elif args.verbose == 2:
        level = LogLevel.DEBUG
    elif config.output.verbose:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL
    logger = configure_logging(level=level, color=config.output.color, stream=sys.stderr)
    if level == LogLevel.TRACE:
        install_trace_hook(logger)
    return config


def _emit(output: str, args) -> None:
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
    else:
        print(output)


def _formatter_options(config: PyTnumConfig) -> dict[str, object]:
    if config.output.format == "text":
        return {"color": config.output.color, "show_timing": config.output.show_timing}
    return {}


def cmd_compare(args) -> int:
    """Execute compare command."""
    config = _prepare(args)
    _override(
        config.compare,
        max_value=args.max_value,
        divisor_min=args.divisor_min,
        divisor_max=args.divisor_max,
        workers=args.workers,
        chunk_size=args.chunk_size,
        incomparable_samples=args.samples,
    )
    comparator = PrecisionComparator(config.compare)
    report = comparator.run()
    _emit(format_report(report, config.output.format, **_formatter_options(config)), args)
    if report.has_disagreement:
        comparator.logger.warning(
            f"{report.counts.incomparable} incomparable pairs need investigation"
        )
        return EXIT_FINDINGS
    comparator.logger.success(f"{report.counts.total} pairs compared, none incomparable")
    return EXIT_OK


def cmd_refute(args) -> int:
    """Execute refute command."""
    config = _prepare(args)
    _override(
        config.refute,
        dividend_min=args.dividend_min,
        dividend_max=args.dividend_max,
        divisor_min=args.divisor_min,
        divisor_max=args.divisor_max,
        timeout_ms=args.timeout_ms,
        divider_width=args.width,
        symbolic_dividends=args.symbolic,
        mask_max=args.mask_max,
    )
    refuter = SoundnessRefuter(config.refute)
    result = refuter.run()
    _emit(format_report(result, config.output.format, **_formatter_options(config)), args)
    if result.verdict is Verdict.SAT:
        refuter.logger.error("fast_divide result excludes a concrete quotient")
        return EXIT_FINDINGS
    if result.verdict is Verdict.UNSAT:
        refuter.logger.success(f"no counterexample in {result.pairs_checked} pairs")
    return EXIT_OK


def cmd_init(args) -> int:
    """Execute init command."""
    try:
        path = init_config(args.directory)
    except FileExistsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    print(f"Created {path}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    commands = {
        "compare": cmd_compare,
        "refute": cmd_refute,
        "init": cmd_init,
    }
    if args.command not in commands:
        parser.print_help()
        return EXIT_USAGE
    try:
        return commands[args.command](args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
