"""Command-line interface for asmdeps."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from report.export import write_json_report
from report.run import run_validation
from rules.config import ConfigError, load_config
from scan.files import ScanError
from verify.verify import verify_determinism

logger = logging.getLogger("asmdeps")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asmdeps",
        description="Validate .NET assembly dependencies across directories.",
    )
    parser.add_argument("config", help="Path to the JSON (or .toml) config file")
    parser.add_argument(
        "--json-out",
        default=None,
        help="Also write the report as JSON to this path",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Worker threads used to read module metadata (default: 1)",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Run the validation twice and fail if the output differs",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _handle_validate(
    config_path: Path, json_out: str | None, jobs: int, verify: bool
) -> int:
    config = load_config(config_path)
    base_dir = config_path.parent

    mismatches: tuple[str, ...] = ()
    if verify:
        result = verify_determinism(config, base_dir=base_dir, jobs=jobs)
        report = result.report
        mismatches = result.mismatches
    else:
        report = run_validation(config, base_dir=base_dir, jobs=jobs)

    sys.stdout.write(report.render())

    if json_out is not None:
        write_json_report(Path(json_out).expanduser().resolve(), report)

    for header in mismatches:
        sys.stderr.write(f"nondeterministic section: {header}\n")
    if mismatches:
        return 1

    return 0 if report.passed else 1


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return 0 if exc.code == 0 else 1

    _configure_logging(args.verbose)

    if args.jobs < 1:
        sys.stderr.write("error: --jobs must be at least 1\n")
        return 1

    config_path = Path(args.config).expanduser().resolve()

    try:
        return _handle_validate(config_path, args.json_out, args.jobs, args.verify)
    except (ConfigError, ScanError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    except Exception:
        logger.exception("Exception occurred")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
