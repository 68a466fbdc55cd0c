from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .config import load_config
from .errors import PuggleError
from .pages import build_site
from .server import serve


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="puggle", description="Markdown blog generator.")
    parser.add_argument(
        "-c",
        "--config-path",
        type=Path,
        default=None,
        help="Path to the config file (default: puggle.yaml, then puggle.yml).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every file that is written.")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("build", help="Generate blog markdown files into full pages.")
    subparsers.add_parser("server", help="Build, watch for changes and serve the site locally.")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> None:
    config = load_config(args.config_path)
    if args.command == "server":
        serve(config, args.config_path)
        return

    start = time.perf_counter()
    build_site(config)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {config.dest_dir}")


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except PuggleError as exc:
        print(exc, file=sys.stderr)
        sys.exit(exc.code)
    except OSError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
