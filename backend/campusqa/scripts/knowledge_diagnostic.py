#!/usr/bin/env python3
"""
Show the similarity scores a query gets against the knowledge store.
Useful for tuning SIMILARITY_THRESHOLD.

Usage:
    cd backend
    python -m campusqa.scripts.knowledge_diagnostic "When does the library close on Saturdays?"
"""
import argparse
import logging
import sys

from campusqa.core.config import settings
from campusqa.services.embedding_service import get_embedding_service
from campusqa.services.knowledge_store import get_knowledge_store

logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(levelname)s - %(message)s')


def run(query: str, top_k: int = 5, embedder=None, store=None) -> int:
    embedder = embedder or get_embedding_service()
    store = store or get_knowledge_store()

    print(f"\nQuery: \"{query}\"\n")
    matches = store.search(embedder.embed(query), top_k=top_k)
    if not matches:
        print("No entries in the knowledge store.")
        return 0

    print(f"Top {len(matches)} matches (threshold {settings.SIMILARITY_THRESHOLD:.2f}):\n")
    for i, match in enumerate(matches, start=1):
        marker = "*" if match.similarity >= settings.SIMILARITY_THRESHOLD else " "
        print(f"{marker}{i}. Similarity: {match.similarity:.4f}  (entry {match.entry_id})")
        print(f"   Content: {match.cleaned_content[:120]}...\n")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("query")
    parser.add_argument("--top-k", type=int, default=5)
    args = parser.parse_args(argv)
    try:
        return run(args.query, top_k=args.top_k)
    except Exception as e:
        print(f"Diagnostic failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
