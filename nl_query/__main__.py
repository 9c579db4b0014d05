#!/usr/bin/env python3
"""
Natural language query CLI

Usage:
    export SUPABASE_URL="https://<project>.supabase.co"
    export SUPABASE_ANON_KEY="..."

    python -m nl_query parse "show completed todos"
    python -m nl_query ask "find todos with id 1"
    python -m nl_query seed
    python -m nl_query serve
"""

import argparse
import asyncio
import json
import logging
import sys

from .backend_client import BackendClient
from .config import get_config
from .errors import NLQueryError
from .query_executor import QueryExecutor, normalize_response
from .query_parser import QueryParser
from .vocabulary import load_vocabulary

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
log = logging.getLogger(__name__)

SAMPLE_TODOS = [
    {"title": "Buy groceries", "is_done": False},
    {"title": "Walk the dog", "is_done": True},
    {"title": "Finish project", "is_done": False},
    {"title": "Read book", "is_done": True},
    {"title": "Learn Rust", "is_done": True},
    {"title": "Build IC app", "is_done": False},
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nl_query",
        description="Query a PostgREST backend with natural language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  SUPABASE_URL            Backend base URL
  SUPABASE_ANON_KEY       Backend API key
  BACKEND_TIMEOUT_MS      Request timeout in milliseconds (default 10000)
  NL_QUERY_VOCABULARY     Optional JSON vocabulary file
        """,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Parse a question and print the query")
    p.add_argument("question")

    p = sub.add_parser("ask", help="Parse and execute a question")
    p.add_argument("question")
    p.add_argument(
        "--format",
        choices=["table", "markdown", "json"],
        default="table",
        help="Output format (default: %(default)s)",
    )

    p = sub.add_parser("seed", help="Insert sample todos")
    p.add_argument("--table", default="todos", help="Target table (default: %(default)s)")

    sub.add_parser("serve", help="Run the HTTP API server")
    return parser


async def _ask(question: str, output_format: str) -> str:
    config = get_config()
    parsed = QueryParser(load_vocabulary(config.vocabulary_path)).parse(question)
    executor = QueryExecutor(BackendClient(config.backend))
    records = await executor.execute(parsed)

    if output_format == "json":
        return json.dumps(records, indent=2)
    if output_format == "markdown":
        return executor.format_results_as_markdown(records)
    return executor.format_results_as_table(records)


async def _seed(table: str) -> int:
    client = BackendClient(get_config().backend)
    response = await client.write(table, json.dumps(SAMPLE_TODOS))
    inserted = normalize_response(response)
    log.info(f"Inserted {len(inserted)} record(s) into {table}")
    return len(inserted)


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.command == "parse":
            config = get_config()
            parsed = QueryParser(load_vocabulary(config.vocabulary_path)).parse(args.question)
            print(json.dumps(parsed.to_dict(), indent=2))
        elif args.command == "ask":
            print(asyncio.run(_ask(args.question, args.format)))
        elif args.command == "seed":
            asyncio.run(_seed(args.table))
        elif args.command == "serve":
            from .server import run_server

            run_server()
        return 0
    except NLQueryError as e:
        log.error(e.message)
        return 1
    except KeyboardInterrupt:
        log.info("\nInterrupted by user")
        return 130
    except Exception as e:
        log.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
