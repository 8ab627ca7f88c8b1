from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rowmap.core.errors import SchemaError
from rowmap.core.serde import json_dumps_canonical
from rowmap.io.config import MapperSettings
from rowmap.io.errors import RowMapIoError
from rowmap.io.rows import map_frame, read_frame
from rowmap.io.schema_file import compile_file

logger = logging.getLogger("rowmap.cli")


def _settings(args: argparse.Namespace) -> MapperSettings:
    """Load settings (env > TOML > defaults) and apply command-line overrides."""
    s = MapperSettings.load(args.config or None)
    overrides: dict[str, object] = {}
    if getattr(args, "optionalize", False):
        overrides["optionalize"] = True
    if getattr(args, "fallible", False):
        overrides["fallible"] = True
    if getattr(args, "no_check", False):
        overrides["check_capabilities"] = False
    if overrides:
        s = MapperSettings._apply_mapping(s, overrides)
    logging.basicConfig(level=s.log_level_value, format="[%(levelname)s] %(name)s: %(message)s")
    return s


def _common(p: argparse.ArgumentParser) -> None:
    p.add_argument("schema", type=str, help="Path to a TOML schema file.")
    p.add_argument("--config", type=str, default="", help="Explicit settings TOML.")
    p.add_argument(
        "--optionalize",
        action="store_true",
        help="Wrap every non-optional field in Option<...> before compiling.",
    )
    p.add_argument(
        "--no-check",
        action="store_true",
        help="Skip compile-time capability checks against the type registry.",
    )


def _cmd_check(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="rowmap check",
        description="Compile every structure in a schema file and print its constraints.",
    )
    _common(p)
    args = p.parse_args(argv)

    settings = _settings(args)
    mappers = compile_file(Path(args.schema), settings)
    for name, mapper in mappers.items():
        print(f"{name}: {len(mapper.field_names)} fields")
        for c in mapper.constraints.render():
            print(f"  {c}")
    return 0


def _cmd_render(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="rowmap render", description="Print the generated procedures of one structure."
    )
    _common(p)
    p.add_argument("--structure", type=str, required=True, help="Structure name.")
    args = p.parse_args(argv)

    mappers = compile_file(Path(args.schema), _settings(args))
    if args.structure not in mappers:
        print(f"Unknown structure: {args.structure}", file=sys.stderr)
        return 2
    print(mappers[args.structure].render())
    return 0


def _cmd_map(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="rowmap map",
        description="Decode a data file (CSV/Parquet/NDJSON) and print one JSON record per row.",
    )
    _common(p)
    p.add_argument("--structure", type=str, required=True, help="Structure name.")
    p.add_argument("--data", type=str, required=True, help="Path to the data file.")
    p.add_argument("--fallible", action="store_true", help="Use try_from_row.")
    p.add_argument("--n", type=int, default=None, help="Maximum rows to decode.")
    args = p.parse_args(argv)

    settings = _settings(args)
    mappers = compile_file(Path(args.schema), settings)
    if args.structure not in mappers:
        print(f"Unknown structure: {args.structure}", file=sys.stderr)
        return 2
    df = read_frame(Path(args.data), n_rows=args.n)
    logger.info("decoding %d rows of %s as %s", df.height, args.data, args.structure)
    for record in map_frame(mappers[args.structure], df, fallible=settings.fallible):
        print(json_dumps_canonical(record))
    return 0


_COMMANDS = {
    "check": _cmd_check,
    "render": _cmd_render,
    "map": _cmd_map,
}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rowmap", description="Compile schemas into row mappers.")
    sub = p.add_subparsers(dest="cmd", required=True)
    for name in _COMMANDS:
        sub.add_parser(name)
    return p


def run(argv: list[str]) -> int:
    """Dispatch one command; returns the process exit code."""
    if not argv:
        build_argparser().print_help()
        return 0
    cmd, rest = argv[0], argv[1:]
    handler = _COMMANDS.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        return 2
    try:
        return handler(rest)
    except (SchemaError, RowMapIoError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    raise SystemExit(run(argv))


if __name__ == "__main__":
    main()
