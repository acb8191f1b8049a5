"""CLI commands for one-off Bitbucket requests and tool invocations."""

import argparse
import asyncio
import json
import logging
import sys


def _parse_params(pairs: list[str]) -> dict:
    params = {}
    for p in pairs:
        k, _, v = p.partition("=")
        params[k] = v
    return params


async def _run_api(args) -> int:
    from .client import (
        add_query_params,
        build_api_url,
        execute_json_request,
        execute_text_request,
        fetch_all_pages,
    )

    url = add_query_params(build_api_url(args.endpoint), _parse_params(args.param))
    if args.text:
        sys.stdout.write(await execute_text_request(url))
        return 0
    if args.all_pages:
        body = await fetch_all_pages(url)
    else:
        body = await execute_json_request(url)
    json.dump(body, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


async def _run_tool(args) -> int:
    from .tools import call_tool

    try:
        arguments = json.loads(args.args) if args.args else {}
    except json.JSONDecodeError as e:
        print(f"Error: --args is not valid JSON: {e}", file=sys.stderr)
        return 2
    result = await call_tool(args.name, arguments)
    print(result.text)
    return 1 if result.is_error else 0


def main():
    parser = argparse.ArgumentParser(
        description="Read-only access to the Bitbucket Cloud API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log requests and retries to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # api subcommand
    api_parser = subparsers.add_parser(
        "api",
        help="Make a raw GET request against the Bitbucket API",
    )
    api_parser.add_argument(
        "endpoint",
        help="API endpoint path (e.g., repositories/workspace/repo/pullrequests)",
    )
    api_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter (repeatable, e.g., --param pagelen=50)",
    )
    api_parser.add_argument(
        "--text",
        action="store_true",
        help="Request text/plain and print the raw body (diffs, logs, files)",
    )
    api_parser.add_argument(
        "--all-pages",
        action="store_true",
        help="Follow 'next' links and print the combined 'values' list",
    )

    # tool subcommand
    tool_parser = subparsers.add_parser(
        "tool",
        help="Invoke a single tool by name",
    )
    tool_parser.add_argument(
        "name",
        help="Tool name (e.g., bb_get_repository)",
    )
    tool_parser.add_argument(
        "--args",
        default=None,
        help='Tool arguments as JSON (e.g., \'{"workspace": "w", "repo_slug": "r"}\')',
    )

    # tools subcommand
    subparsers.add_parser(
        "tools",
        help="List available tools",
    )

    args = parser.parse_args()

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "api":
        sys.exit(asyncio.run(_run_api(args)))
    elif args.command == "tool":
        sys.exit(asyncio.run(_run_tool(args)))
    elif args.command == "tools":
        from .tools import TOOLS

        for spec in TOOLS.values():
            print(f"{spec.name}: {spec.description}")
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
