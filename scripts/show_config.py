#!/usr/bin/env python3
"""Print the merged configuration that configer would produce."""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

import configer
from configer.exceptions import ConfigerError


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr
    )


def build_options(args: argparse.Namespace) -> list:
    """Translate command-line arguments into configer options.

    Args:
        args: Parsed arguments.

    Returns:
        List of options for :func:`configer.new`.
    """
    options = [
        configer.with_config_file_type(args.type),
        configer.with_env_config_file_prefix(args.prefix),
        configer.with_env_var_name(args.env_var),
        configer.with_automatic_env(not args.no_auto_env),
    ]
    if args.env_prefix:
        options.append(configer.with_env_prefix(args.env_prefix))
    if args.bind:
        options.append(configer.with_bind_env(*args.bind))
    return options


def main() -> int:
    parser = argparse.ArgumentParser(description="Show merged configuration")
    parser.add_argument("--type", default="toml", help="Config file type")
    parser.add_argument("--prefix", default="config/", help="Config file path prefix")
    parser.add_argument("--env-var", default="ENV", help="Variable selecting the overlay file")
    parser.add_argument("--env-prefix", default="", help="Prefix for environment variables")
    parser.add_argument("--bind", nargs="*", help="Keys to bind to environment variables")
    parser.add_argument("--no-auto-env", action="store_true", help="Disable automatic env lookup")
    parser.add_argument("--key", help="Only show the sub-tree under this key")
    parser.add_argument("--format", choices=["yaml", "json"], default="yaml", help="Output format")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        cfg = configer.new(*build_options(args))
    except ConfigerError as e:
        logger.error(f"Could not build configuration: {e}")
        return 1

    if args.key:
        cfg = cfg.sub(args.key)

    settings = cfg.all_settings()
    if args.format == "json":
        print(json.dumps(settings, indent=2, default=str))
    else:
        print(yaml.safe_dump(settings, default_flow_style=False, sort_keys=True), end="")

    return 0


if __name__ == "__main__":
    sys.exit(main())
