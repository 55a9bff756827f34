"""Headless entry point: ``python -m print_bridge``."""

import argparse
import sys

from print_bridge.config.settings import generate_secure_token, load_config, update_config
from print_bridge.errors import ConfigError
from print_bridge.server import run_headless


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="print-bridge",
        description="Serve the local print bridge without the desktop shell.",
    )
    parser.add_argument("--host", help="Override the configured listen address")
    parser.add_argument("--port", type=int, help="Override the configured port")
    parser.add_argument(
        "--generate-token",
        action="store_true",
        help="Store a new random API token in the config file, print it and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_config()
        if args.generate_token:
            token = generate_secure_token()
            update_config(settings.model_copy(update={"api_token": token}))
            print(token)
            return 0
    except ConfigError as e:
        print(f"print-bridge: {e.message}", file=sys.stderr)
        return 2

    overrides = {k: v for k, v in (("host", args.host), ("port", args.port)) if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)

    run_headless(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
