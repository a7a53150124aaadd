"""CLI commands for managing memory collections."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config.runtime import get_settings
from .mcp.tools import enhance_payload, extract_text
from .models.mcp_requests import StoreMemoryRequest
from .ports.embedding import EmbedderError
from .ports.vector_store import VectorStoreError
from .wiring import build_memory_service


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def load_memories_from_file(path: Path) -> list[StoreMemoryRequest]:
    """Load memories (objects with id, text and optional metadata) from a JSON file."""
    if not path.exists():
        _fail(f"memories file not found: {path}")
    with open(path, encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            _fail(f"invalid JSON in {path}: {e}")
    if not isinstance(raw, list):
        _fail("JSON file must contain a list of memory objects.")
    memories: list[StoreMemoryRequest] = []
    for i, item in enumerate(raw):
        try:
            memories.append(StoreMemoryRequest.model_validate(item))
        except ValidationError as e:
            _fail(f"invalid memory at index {i}: {e}")
    return memories


def _parse_filter(raw: str | None) -> dict | None:
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        _fail(f"invalid --filter JSON: {e}")
    if not isinstance(value, dict):
        _fail("--filter must be a JSON object")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage mnemo memory collections in Qdrant")
    parser.add_argument("--collection", default=None, help="Collection name (default: MNEMO_DEFAULT_COLLECTION)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    create_parser = subparsers.add_parser("create", help="Create the collection if missing")
    create_parser.add_argument(
        "--dimension",
        type=int,
        default=None,
        help="Embedding dimension (default: MNEMO_EMBEDDING_DIMENSION)",
    )
    create_parser.add_argument("--distance", default="Cosine", help="Distance metric (default: Cosine)")

    subparsers.add_parser("delete", help="Delete the collection")
    subparsers.add_parser("info", help="Show collection information")

    load_parser = subparsers.add_parser("load", help="Embed and store memories from a JSON file")
    load_parser.add_argument("--file", type=Path, required=True, help="Path to JSON list of memories")

    search_parser = subparsers.add_parser("search", help="Semantic search over stored memories")
    search_parser.add_argument("--query", required=True, help="Natural language query")
    search_parser.add_argument("--top-k", type=int, default=5, help="Number of results (default: 5)")
    search_parser.add_argument("--filter", default=None, help="Filter as JSON")

    count_parser = subparsers.add_parser("count", help="Count stored memories")
    count_parser.add_argument("--filter", default=None, help="Filter as JSON")
    count_parser.add_argument("--exact", action="store_true", help="Exact count")
    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    logging.basicConfig(level=get_settings().log_level)
    svc = build_memory_service()
    collection = args.collection

    try:
        if args.command == "create":
            result = svc.ensure_collection(dimension=args.dimension, collection=collection, distance=args.distance)
            if result["created"]:
                print(f"Created collection: {result['name']} (dimension {result['dimension']})")
            else:
                print(f"Collection already exists: {result['name']}")
        elif args.command == "delete":
            svc.delete_collection(collection)
            print("Deleted collection.")
        elif args.command == "info":
            info = svc.collection_info(collection)
            print(f"Collection: {info['name']}")
            print(f"Status: {info['status']}")
            print(f"Points count: {info['points_count']}")
            print(f"Indexed vectors count: {info['indexed_vectors_count']}")
            print(f"Dimension: {info['dimension']}")
        elif args.command == "load":
            memories = load_memories_from_file(args.file)
            print(f"Storing {len(memories)} memories from {args.file}...")
            for memory in memories:
                payload = enhance_payload(memory.text, memory.metadata or {})
                svc.store_from_text(memory.id, memory.text, payload, memory.collection or collection)
            print(f"Successfully stored {len(memories)} memories.")
        elif args.command == "search":
            results = svc.search_from_text(
                args.query,
                top_k=args.top_k,
                query_filter=_parse_filter(args.filter),
                collection=collection,
            )
            for r in results:
                print(f"{r.score:.4f}  {r.id}  {extract_text(r.payload) or ''}")
            print(f"{len(results)} result(s).")
        elif args.command == "count":
            total = svc.count(_parse_filter(args.filter), exact=args.exact, collection=collection)
            print(total)
    except (VectorStoreError, EmbedderError) as e:
        _fail(e.message)


if __name__ == "__main__":
    main()
