"""CLI entrypoints for reportfactory commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml

from .deps import list_deps
from .errors import ReportFactoryError
from .factory import list_outputs, list_reports, new_factory
from .logging import configure_logging
from .pipeline import compile_reports


def _add_common_options(parser: argparse.ArgumentParser, *, suppress_default: bool = False) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_factory_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--factory",
        default=".",
        help="Path to the factory or any folder inside it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reportfactory",
        description="Compile literate reports into timestamped output folders.",
    )
    _add_common_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="Create a new report factory.")
    _add_common_options(new_parser, suppress_default=True)
    new_parser.add_argument("path", help="Folder to create the factory in.")
    new_parser.add_argument("--name", default=None, help="Factory name (defaults to folder name).")
    new_parser.add_argument(
        "--no-example",
        action="store_true",
        help="Do not create the example report.",
    )

    list_parser = subparsers.add_parser("list", help="List the reports of a factory.")
    _add_common_options(list_parser, suppress_default=True)
    _add_factory_option(list_parser)

    outputs_parser = subparsers.add_parser("outputs", help="List compiled output files.")
    _add_common_options(outputs_parser, suppress_default=True)
    _add_factory_option(outputs_parser)

    deps_parser = subparsers.add_parser(
        "deps", help="List libraries referenced by reports and scripts."
    )
    _add_common_options(deps_parser, suppress_default=True)
    _add_factory_option(deps_parser)
    deps_parser.add_argument(
        "--missing",
        action="store_true",
        help="Only show libraries that cannot be imported in this environment.",
    )

    compile_parser = subparsers.add_parser("compile", help="Compile one or more reports.")
    _add_common_options(compile_parser, suppress_default=True)
    _add_factory_option(compile_parser)
    compile_parser.add_argument(
        "reports",
        nargs="*",
        help="Regular expressions matched against report paths (default: all reports).",
    )
    compile_parser.add_argument(
        "--index",
        type=int,
        nargs="+",
        default=None,
        help="Zero-based positions in `reportfactory list` output.",
    )
    compile_parser.add_argument(
        "-i",
        "--ignore-case",
        action="store_true",
        help="Match report patterns case-insensitively.",
    )
    compile_parser.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Report parameter overriding header defaults (value parsed as YAML).",
    )
    compile_parser.add_argument("--subfolder", default=None, help="Folder placed before the timestamp.")
    compile_parser.add_argument("--timestamp", default=None, help="Override the output timestamp.")
    compile_parser.add_argument(
        "--show-output",
        action="store_true",
        help="Stream rendering engine output instead of capturing it.",
    )
    compile_parser.add_argument(
        "--engine-arg",
        action="append",
        default=[],
        metavar="ARG",
        help="Extra argument passed through to the rendering engine.",
    )
    compile_parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep compiling remaining reports after a failure.",
    )

    return parser


def parse_params(values: Sequence[str]) -> Dict[str, Any] | None:
    """Turn KEY=VALUE strings into a parameter mapping."""
    if not values:
        return None
    params: Dict[str, Any] = {}
    for item in values:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Parameters must look like KEY=VALUE; got '{item}'")
        try:
            params[key] = yaml.safe_load(raw) if raw.strip() else ""
        except yaml.YAMLError:
            params[key] = raw
    return params


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for reportfactory commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        if args.command == "new":
            root = new_factory(
                args.path,
                name=args.name,
                create_example_report=not args.no_example,
            )
            print(f"Factory created at {_relativize(root)}")
        elif args.command == "list":
            _print_lines(list_reports(args.factory))
        elif args.command == "outputs":
            _print_lines(list_outputs(args.factory))
        elif args.command == "deps":
            _print_lines(list_deps(args.factory, missing=bool(args.missing)))
        elif args.command == "compile":
            if args.reports and args.index is not None:
                parser.error("report patterns and --index cannot be combined")
            try:
                params = parse_params(args.param)
            except ValueError as exc:
                parser.error(str(exc))
            compile_reports(
                args.index if args.index is not None else (args.reports or None),
                args.factory,
                ignore_case=bool(args.ignore_case),
                params=params,
                quiet=not args.show_output,
                subfolder=args.subfolder,
                timestamp=args.timestamp,
                engine_options=list(args.engine_arg),
                on_error="continue" if args.continue_on_error else None,
            )
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except FileExistsError as exc:
        parser.exit(1, f"{exc}\n")
    except ReportFactoryError as exc:
        parser.exit(1, f"reportfactory {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _print_lines(lines: List[str]) -> None:
    for line in lines:
        print(line)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
