#!/usr/bin/env python3
"""
Operator command line for Lern API configuration.

Commands:
    env-name KEY [KEY ...]   print the environment variable shadowing each key
    get KEY [--type T]       resolve a key and report which source answered
    list KEY                 resolve a list key, one item per line
    show                     print every key in the loaded files with its source
    sample [--json]          print a sample appsettings file
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from .config import (
    DEFAULT_CONFIG_JSON,
    DEFAULT_CONFIG_YAML,
    ConfigResolver,
    env_var_name,
    flatten,
    load_configuration,
)
from .core.errors import LernStartupError

TYPES = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "duration": timedelta,
}


def _resolver(args) -> ConfigResolver:
    search_dirs = [Path(args.config_dir)] if args.config_dir else None
    tree = load_configuration(search_dirs, environment=args.environment)
    return ConfigResolver(tree)


def cmd_env_name(args) -> int:
    for key in args.keys:
        print(f"{key}\t{env_var_name(key)}")
    return 0


def cmd_get(args) -> int:
    resolver = _resolver(args)
    resolution = resolver.describe(args.key)
    value = resolver.get(args.key, TYPES[args.type])
    print(f"key:      {resolution.key}")
    print(f"env var:  {resolution.env_name}")
    print(f"source:   {resolution.source}")
    print(f"value:    {value!r}")
    return 0


def cmd_list(args) -> int:
    resolver = _resolver(args)
    for item in resolver.get_list(args.key):
        print(item)
    return 0


def cmd_show(args) -> int:
    resolver = _resolver(args)
    for key, value in flatten(resolver.tree).items():
        resolution = resolver.describe(key)
        shown = resolution.raw_value if resolution.source != "tree" else value
        print(f"{key} = {shown!r}  [{resolution.source}: {resolution.env_name}]")
    return 0


def cmd_sample(args) -> int:
    print(DEFAULT_CONFIG_JSON if args.json else DEFAULT_CONFIG_YAML.strip())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lern-config", description="Lern API configuration tool")
    parser.add_argument("--config-dir", help="Directory containing appsettings files")
    parser.add_argument("--environment", help="Overlay name, e.g. Production")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    env_parser = subparsers.add_parser("env-name", help="Print environment variable names for keys")
    env_parser.add_argument("keys", nargs="+", help="Configuration keys")
    env_parser.set_defaults(func=cmd_env_name)

    get_parser = subparsers.add_parser("get", help="Resolve a key")
    get_parser.add_argument("key", help="Configuration key")
    get_parser.add_argument("--type", choices=sorted(TYPES), default="str", help="Requested type")
    get_parser.set_defaults(func=cmd_get)

    list_parser = subparsers.add_parser("list", help="Resolve a list key")
    list_parser.add_argument("key", help="Configuration key")
    list_parser.set_defaults(func=cmd_list)

    show_parser = subparsers.add_parser("show", help="Show loaded keys and their sources")
    show_parser.set_defaults(func=cmd_show)

    sample_parser = subparsers.add_parser("sample", help="Print a sample configuration file")
    sample_parser.add_argument("--json", action="store_true", help="Print JSON instead of YAML")
    sample_parser.set_defaults(func=cmd_sample)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except LernStartupError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
