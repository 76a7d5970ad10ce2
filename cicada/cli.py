"""CLI for the CICADA retrieval engine."""

import argparse
import json
import os
import sys

from .config import CicadaConfig
from .log import configure_logging


def _config_from_args(args: argparse.Namespace) -> CicadaConfig:
    config = CicadaConfig.from_env()
    if args.data_dir:
        config.data_dir = args.data_dir
    return config


def _require_api_key(config: CicadaConfig) -> None:
    env_var = {"openai": "OPENAI_API_KEY", "jina": "JINA_API_KEY"}.get(config.embedding_provider)
    if env_var and not os.environ.get(env_var):
        print(f"Error: Set {env_var} environment variable")
        sys.exit(1)


def search(args: argparse.Namespace) -> None:
    """Search the script and print ranked passages."""
    from .citations import format_search_results
    from .engine import Cicada
    from .errors import CicadaError
    from .models import SearchOptions

    config = _config_from_args(args)
    _require_api_key(config)

    try:
        options = SearchOptions.build(
            top_k=args.top_k if args.top_k is not None else config.default_top_k,
            min_score=args.min_score if args.min_score is not None else config.default_min_score,
            episode_ids=args.episode,
            character=args.character,
            chapter_id=args.chapter,
        )
        response = Cicada(config).search(args.query, options, group=args.group)
    except CicadaError as e:
        print(f"Error [{e.code}]: {e.message}")
        sys.exit(2)

    if args.json:
        print(json.dumps(
            {
                "citations": [c.to_dict() for c in response.citations],
                "scores": [r.score for r in response.results],
                "has_direct_evidence": response.has_direct_evidence,
            },
            indent=2,
            ensure_ascii=False,
        ))
        return

    if response.groups is not None:
        for episode_id, results in response.groups.items():
            print(f"=== Episode: {episode_id} ===")
            print(format_search_results(results))
            print()
    else:
        print(format_search_results(response.results))

    if not response.has_direct_evidence:
        print("\n(no direct evidence: any answer would be inference)")


def serve(args: argparse.Namespace) -> None:
    """Start the REST API server."""
    try:
        import uvicorn
        from .api import create_app
    except ImportError:
        print("Error: API dependencies not installed.")
        print("  Run: pip install 'cicada-retrieval[api]'")
        sys.exit(1)

    config = _config_from_args(args)
    _require_api_key(config)
    app = create_app(config=config)

    print(f"Starting CICADA API server on http://{args.host}:{args.port}")
    print(f"  Data: {config.data_dir}")
    print(f"  Docs: http://{args.host}:{args.port}/docs\n")

    uvicorn.run(app, host=args.host, port=args.port)


def stats(args: argparse.Namespace) -> None:
    """Show passage counts per episode."""
    from .storage import FilePassageStore

    config = _config_from_args(args)
    store = FilePassageStore(config.data_dir)
    counts = store.count_by_episode()
    print(json.dumps(
        {"data_dir": config.data_dir, "passages": sum(counts.values()), "episodes": counts},
        indent=2,
    ))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cicada",
        description="CICADA - semantic script search with citations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cicada search "Why does Rena say 'uso da'?" --episode onikakushi
  cicada search "Shion" --character Shion --group
  cicada stats
  cicada serve --port 8000

Environment variables:
  OPENAI_API_KEY          Required for OpenAI embeddings
  CICADA_DATA_DIR         Passage store root (default: data)
  CICADA_EMBEDDING_MODEL  Must match the model used at ingestion
"""
    )

    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")
    parser.add_argument("--data-dir", type=str, help="Passage store root (default: data)")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    search_parser = subparsers.add_parser("search", help="Search the script")
    search_parser.add_argument("query", type=str, help="Query text")
    search_parser.add_argument(
        "--episode", action="append", help="Restrict to an episode id (repeatable)"
    )
    search_parser.add_argument("--character", type=str, help="Only passages featuring this character")
    search_parser.add_argument("--chapter", type=str, help="Restrict to one chapter id")
    search_parser.add_argument("--top-k", type=int, default=None, help="Number of results")
    search_parser.add_argument("--min-score", type=float, default=None, help="Similarity threshold")
    search_parser.add_argument("--group", action="store_true", help="Group results by episode")
    search_parser.add_argument("--json", action="store_true", help="Print citations as JSON")
    search_parser.set_defaults(func=search)

    serve_parser = subparsers.add_parser("serve", help="Start REST API server")
    serve_parser.add_argument(
        "--host", type=str, default="127.0.0.1", help="Host to bind (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", type=int, default=8000, help="Port to bind (default: 8000)"
    )
    serve_parser.set_defaults(func=serve)

    stats_parser = subparsers.add_parser("stats", help="Show passage counts")
    stats_parser.set_defaults(func=stats)

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    configure_logging(args.log_level or CicadaConfig.from_env().log_level)
    args.func(args)


if __name__ == "__main__":
    main()
