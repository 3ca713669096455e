"""
Command line entry point.

    python -m lazyconf show database
    python -m lazyconf --dir ./config check database cache app
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from .accessor import ConfigAccessor
from .errors import LazyConfError
from .freeze import thaw
from .logging import get_logger, setup_logging, stop_logging
from .settings import DEFAULT_EXPORT_NAME, DEFAULT_EXTENSION, AccessorSettings

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyconf",
        description="Resolve configuration keys the way the application would.",
    )
    parser.add_argument(
        "--dir",
        dest="directory",
        help="Configuration directory (default: CONFIG_DIRECTORY, CONFIG_DIR or ./config)",
    )
    parser.add_argument(
        "--ext",
        dest="extension",
        default=DEFAULT_EXTENSION,
        help=f"Configuration file extension (default: {DEFAULT_EXTENSION})",
    )
    parser.add_argument(
        "--export",
        dest="export_name",
        default=DEFAULT_EXPORT_NAME,
        help=f"Module attribute holding the configuration (default: {DEFAULT_EXPORT_NAME})",
    )
    parser.add_argument("--env-file", help="Optional .env file read before the environment")
    parser.add_argument("--log-level", help="Logging level (default: LAZYCONF_LOG_LEVEL or INFO)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print one configuration value as JSON")
    show.add_argument("key")

    check = subparsers.add_parser("check", help="Verify that configuration keys load")
    check.add_argument("keys", nargs="+")

    return parser


def build_settings(args: argparse.Namespace) -> AccessorSettings:
    settings = AccessorSettings.from_env(
        dotenv_path=args.env_file,
        extension=args.extension,
        export_name=args.export_name,
    )
    if args.directory:
        settings = AccessorSettings(
            directory=Path(args.directory),
            environment=settings.environment,
            extension=settings.extension,
            export_name=settings.export_name,
        )
    return settings


async def show(accessor: ConfigAccessor, key: str) -> int:
    try:
        value = await accessor.get(key)
    except LazyConfError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print(json.dumps(thaw(value), indent=2, default=_json_default))
    return 0


async def check(accessor: ConfigAccessor, keys: list[str]) -> int:
    results = await asyncio.gather(
        *(accessor.get(key) for key in keys), return_exceptions=True
    )

    failed = []
    for key, result in zip(keys, results):
        if isinstance(result, LazyConfError):
            print(f"❌ {key}: {result}")
            failed.append(key)
        elif isinstance(result, BaseException):
            raise result
        else:
            print(f"✅ {key}")

    if failed:
        print(f"\n{len(failed)} of {len(keys)} configuration key(s) failed to load")
        return 1
    return 0


def _json_default(value: object) -> object:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    return repr(value)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        try:
            settings = build_settings(args)
        except LazyConfError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 2

        accessor = ConfigAccessor(settings)
        logger.debug(f"Resolving configuration from {settings.directory}")
        if args.command == "show":
            return asyncio.run(show(accessor, args.key))
        return asyncio.run(check(accessor, args.keys))
    finally:
        stop_logging()
