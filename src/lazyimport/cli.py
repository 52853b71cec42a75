"""lazyimport CLI — run a Python script under the import interceptor.

A single run starts with an empty type cache, so every module is loaded and
classified the first time it is imported, and later imports of it return the
same object from the module cache.  No deferred handle is created.  The run
traces each import decision (with ``-v``) and ``--report`` lists which
modules a seeded importer could defer; see :func:`lazyimport.start`.

Usage::

    python -m lazyimport [options] script.py [script args...]

Options::

    --exclude / -x PATTERN  Always import matching requests eagerly (repeatable)
    --all-requests          Also defer dotted and relative requests
    --report                Print the classification of every imported module
    --verbose / -v          Enable verbose logging (shows every import decision)
"""

import argparse
import logging
import sys
from pathlib import Path

from lazyimport.config import ConfigError, load_config
from lazyimport.exclusions import ExclusionPatternError
from lazyimport.interceptor import LazyImporter
from lazyimport.typecache import Classification, TypeCache


def _format_report(type_cache: TypeCache) -> str:
    """Group recorded module paths by classification."""
    records = type_cache.as_dict()
    lines = [f"--- lazyimport: {len(records)} modules classified ---"]
    for classification in Classification:
        paths = sorted(p for p, c in records.items() if c is classification)
        if not paths:
            continue
        deferrable = "deferrable" if TypeCache.is_proxiable(classification) else "eager"
        lines.append(f"{classification.value} ({deferrable}): {len(paths)}")
        lines.extend(f"  {path}" for path in paths)
    return "\n".join(lines)


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    if isinstance(exc.code, int):
        return exc.code
    print(exc.code, file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="lazyimport",
        description=(
            "Run a Python script under the lazyimport interceptor, tracing import\n"
            "decisions and optionally reporting which modules could be deferred.\n\n"
            "Options are read from [tool.lazyimport] in pyproject.toml and the "
            "LAZYIMPORT_* environment variables; flags take precedence."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "script",
        type=Path,
        help="Path to the script to run",
    )
    parser.add_argument(
        "script_args",
        nargs=argparse.REMAINDER,
        help="Arguments passed through to the script",
    )
    parser.add_argument(
        "--exclude", "-x",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Regular expression of requests to always import eagerly",
    )
    parser.add_argument(
        "--all-requests",
        action="store_true",
        default=False,
        help="Also defer dotted and relative requests (default: bare package names only)",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        default=False,
        help="Print module classifications after the script finishes",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        default=False,
        help="Enable verbose logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the script's exit code (1 on setup errors)."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    script = Path(args.script).resolve()
    if not script.is_file():
        print(f"Error: Script does not exist: {script}", file=sys.stderr)
        return 1

    try:
        config = load_config(script.parent)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    config.exclusions.extend(args.exclude)
    if args.all_requests:
        config.package_only = False

    try:
        importer = LazyImporter.from_config(config)
    except ExclusionPatternError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    code = 0
    importer.enable()
    try:
        importer.host.run_main(script, args.script_args)
    except SystemExit as exc:
        code = _exit_code(exc)
    finally:
        # Records are dropped on disable, so report first.
        if args.report:
            print(_format_report(importer.type_cache))
        importer.disable()
    return code
