"""
CLI entrypoint for browserpack.

Usage:
    python -m browserpack wrap node_modules/foo/index.js node_modules/foo/lib/a.js
    python -m browserpack wrap --config browserpack.yaml --bundle node_modules/foo/*.js
    python -m browserpack aliases node_modules/foo/index.js
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from browserpack.config import BundlerConfig, ConfigError
from browserpack.session import BundleSession


def load_config(config_arg) -> BundlerConfig:
    """Config from a YAML file if given, else from the environment."""
    if config_arg:
        return BundlerConfig.from_yaml(Path(config_arg))
    return BundlerConfig.from_env()


async def run(args) -> str:
    config = load_config(args.config)
    if args.log_level:
        config.log_level = args.log_level.upper()
    logging.basicConfig(level=config.log_level, format='%(levelname)s %(name)s: %(message)s')

    session = BundleSession(config)
    wrapped = await session.wrap_files(args.files)

    if args.command == 'aliases':
        return json.dumps(session.aliases(wrapped.keys()), indent=2, sort_keys=True)
    if args.bundle:
        return session.render(wrapped)
    return '\n'.join(wrapped.values())


def main():
    parser = argparse.ArgumentParser(
        description='Wrap node_modules files for a browser bundle',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config', help='Path to browserpack YAML config (default: BROWSERPACK_* env vars)')
    parser.add_argument('--log-level', help='Override configured log level')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    wrap_parser = subparsers.add_parser('wrap', help='Print wrapped modules')
    wrap_parser.add_argument('files', nargs='+', help='Files to wrap')
    wrap_parser.add_argument('--bundle', action='store_true',
                             help='Include the runtime helper and alias registration')

    aliases_parser = subparsers.add_parser('aliases', help='Print the alias table for a set of files')
    aliases_parser.add_argument('files', nargs='+', help='Files in the bundle')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)
    if args.command == 'aliases':
        args.bundle = False

    try:
        print(asyncio.run(run(args)))
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
