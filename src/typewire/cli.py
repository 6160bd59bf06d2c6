"""Command-line interface for typewire.

Usage::

    typewire describe package.module:Person [--pretty]
    typewire describe package.module:handler
    typewire functions registry.yaml
    python -m typewire.cli describe ...
"""

from __future__ import annotations

import argparse
import inspect
import json
import sys


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typewire",
        description="typewire CLI: inspect type descriptors and function registries.",
    )
    sub = parser.add_subparsers(dest="command")

    desc = sub.add_parser(
        "describe",
        help="Print the canonical descriptor of a type or function.",
    )
    desc.add_argument(
        "target",
        help="Import path of a type or function (package.module:name).",
    )
    desc.add_argument(
        "--pretty", action="store_true", default=False,
        help="Indent the output instead of printing the canonical key.",
    )

    funcs = sub.add_parser(
        "functions",
        help="List the signatures registered by a config file.",
    )
    funcs.add_argument("config", help="Path to a .json, .toml, .yaml or .yml file.")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "describe":
        return _cmd_describe(args)

    if args.command == "functions":
        return _cmd_functions(args)

    return 0


def _cmd_describe(args: argparse.Namespace) -> int:
    from .config import resolve_import_path
    from .exc import TypewireError
    from .types.describe import describe, describe_callable

    try:
        target = resolve_import_path(args.target)
    except (ImportError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        if inspect.isroutine(target):
            desc = describe_callable(target)
        else:
            desc = describe(target)
    except TypewireError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.pretty:
        print(json.dumps(desc.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(desc.key)
    return 0


def _cmd_functions(args: argparse.Namespace) -> int:
    from .config import registry_from_config
    from .exc import TypewireError

    try:
        registry = registry_from_config(args.config)
    except (OSError, ImportError, ValueError, TypewireError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    for key in registry.signatures:
        entry = registry.lookup(key)
        print(f"{entry.func.__module__}:{entry.func.__qualname__}  {key}")

    print(f"\n{len(registry)} function(s) registered")
    return 0


if __name__ == "__main__":
    sys.exit(main())
