from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import yaml

from .config import CONFIG_PATH, AppConfig, load_config, save_config, with_overrides
from .mcp_server import main as mcp_main
from .mcp_server import setup_logging
from .state import ToolResult
from .tools.manager import MAX_RESULTS, MIN_RESULTS, ToolManager


def _num_results(value: str) -> int:
    n = int(value)
    if not MIN_RESULTS <= n <= MAX_RESULTS:
        raise argparse.ArgumentTypeError(f"must be between {MIN_RESULTS} and {MAX_RESULTS}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minimax-tools",
        description="MiniMax web search and image understanding tools for agent hosts.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--api-host", help="Override the MiniMax API host")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser(
        "mcp",
        help="Run the MCP (Model Context Protocol) server over stdio.",
    )

    search_parser = subparsers.add_parser("search", help="Run a single web search")
    search_parser.add_argument("query", help="The search query")
    search_parser.add_argument(
        "-n", "--num-results", type=_num_results, default=None,
        help=f"Number of results to show ({MIN_RESULTS}-{MAX_RESULTS})",
    )
    search_parser.set_defaults(func=search_command)

    image_parser = subparsers.add_parser("image", help="Analyze a single image")
    image_parser.add_argument("image", help="URL or local path to the image")
    image_parser.add_argument("-p", "--prompt", help="Question or prompt about the image")
    image_parser.set_defaults(func=image_command)

    config_parser = subparsers.add_parser("config", help="Configuration helpers")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    show_parser = config_sub.add_parser("show", help="Print the effective configuration (key masked)")
    show_parser.set_defaults(func=config_show_command)
    init_parser = config_sub.add_parser("init", help=f"Write a config file to {CONFIG_PATH}")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")
    init_parser.set_defaults(func=config_init_command)

    return parser


def _print_result(result: ToolResult) -> int:
    print(result.text_content)
    return 1 if result.is_error else 0


def search_command(args: argparse.Namespace, cfg: AppConfig) -> int:
    manager = ToolManager(cfg)
    return _print_result(asyncio.run(manager.run_web_search(args.query, args.num_results)))


def image_command(args: argparse.Namespace, cfg: AppConfig) -> int:
    manager = ToolManager(cfg)
    return _print_result(asyncio.run(manager.run_understand_image(args.image, args.prompt)))


def config_show_command(args: argparse.Namespace, cfg: AppConfig) -> int:
    print(yaml.safe_dump(cfg.masked(), sort_keys=True), end="")
    return 0


def config_init_command(args: argparse.Namespace, cfg: AppConfig) -> int:
    if CONFIG_PATH.exists() and not args.force:
        print(f"{CONFIG_PATH} already exists (use --force to overwrite)")
        return 1
    save_config(AppConfig(api_host=cfg.api_host, timeout=cfg.timeout), CONFIG_PATH)
    print(f"Wrote {CONFIG_PATH}")
    return 0


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    if args.verbose:
        setup_logging(logging.DEBUG)
    elif args.command != "mcp":
        setup_logging(logging.WARNING)
    cfg = load_config()
    if args.api_host:
        cfg = with_overrides(cfg, api_host=args.api_host)
    if args.command == "mcp":
        mcp_main(cfg)
        return
    if hasattr(args, "func"):
        sys.exit(args.func(args, cfg))
    parser.print_help()
    sys.exit(2)


if __name__ == "__main__":
    main()
