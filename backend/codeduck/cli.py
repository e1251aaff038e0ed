"""
`codeduck` command line interface.

Commands
--------
codeduck embed --dir <path>              -- extract, embed and index a Rust tree
codeduck search --prompt "<query>"       -- search the index
codeduck search --prompt "<query>" --top-k 8
codeduck serve --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_config
from .core import CodeDuckError

logger = logging.getLogger(__name__)


def _cmd_embed(args: argparse.Namespace) -> int:
    from .indexing import build_index

    cfg = load_config()
    count = build_index(args.dir, cfg)
    print(f"Indexed {count} entities from {args.dir}")
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    from .search import format_hit, search

    cfg = load_config()
    hits = search(cfg, args.prompt, top_k=args.top_k)
    if not hits:
        print(f"  (no results for: {args.prompt})")
        return 0
    for hit in hits:
        print(format_hit(hit))
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .web import create_app

    cfg = load_config()
    host = args.host or cfg["server"]["host"]
    port = args.port or cfg["server"]["port"]
    uvicorn.run(create_app(cfg), host=host, port=port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codeduck", description="Semantic search over Rust code.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    embed = sub.add_parser("embed", help="Index a directory of Rust sources")
    embed.add_argument("-d", "--dir", default=".", help="Directory to index (default: .)")
    embed.set_defaults(func=_cmd_embed)

    search = sub.add_parser("search", help="Search the index")
    search.add_argument("-p", "--prompt", required=True, help="Natural-language or code-like query")
    search.add_argument("-k", "--top-k", type=int, default=None, help="Hits per vector space")
    search.set_defaults(func=_cmd_search)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (CodeDuckError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
