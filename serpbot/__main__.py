"""Command line entry point: search, then optionally read a result page."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from loguru import logger

from serpbot.config.loader import load_config
from serpbot.search.janitor import ResultJanitor
from serpbot.search.store import ResultStore
from serpbot.tools.factory import build_tool_registry


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="serpbot", description=__doc__)
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json")
    parser.add_argument("--transport", choices=("browser", "http"), default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Run one search and print results as JSON")
    search.add_argument("query")
    search.add_argument("-n", "--num-results", type=int, default=None)
    search.add_argument(
        "--fetch",
        type=int,
        default=None,
        metavar="K",
        help="Also print the page content of result K (1-based)",
    )

    sub.add_parser("shell", help="Interactive session: 'search <query>' / 'fetch <id>'")
    return parser.parse_args(argv)


async def _run_search(registry, args: argparse.Namespace) -> int:
    params: dict = {"query": args.query}
    if args.num_results is not None:
        params["num_results"] = args.num_results
    output = await registry.execute("bing_search", params)
    print(output)
    if output.startswith("Error"):
        return 1

    if args.fetch is None:
        return 0
    results = json.loads(output)
    if not 1 <= args.fetch <= len(results):
        print(f"Error: --fetch must be between 1 and {len(results)}", file=sys.stderr)
        return 2
    content = await registry.execute("fetch_webpage", {"result_id": results[args.fetch - 1]["id"]})
    print(content)
    return 1 if content.startswith("Error") else 0


async def _run_shell(registry, janitor: ResultJanitor) -> int:
    await janitor.start()
    try:
        while True:
            try:
                line = await asyncio.to_thread(input, "serpbot> ")
            except EOFError:
                break
            command, _, arg = line.strip().partition(" ")
            if command in {"quit", "exit"}:
                break
            if command == "search" and arg:
                print(await registry.execute("bing_search", {"query": arg}))
            elif command == "fetch" and arg:
                print(await registry.execute("fetch_webpage", {"result_id": arg.strip()}))
            elif command:
                print("Usage: search <query> | fetch <result id> | quit")
    finally:
        janitor.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    config = load_config(args.config)
    if args.transport:
        config.search.transport = args.transport

    store = ResultStore(ttl_s=config.store.ttl_s, max_results=config.store.max_results)
    registry = build_tool_registry(config, store=store)

    if args.command == "search":
        return asyncio.run(_run_search(registry, args))

    janitor = ResultJanitor(
        store,
        interval_s=config.store.cleanup_interval_s,
        enabled=config.store.cleanup_enabled,
    )
    return asyncio.run(_run_shell(registry, janitor))


if __name__ == "__main__":
    raise SystemExit(main())
