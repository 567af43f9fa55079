"""
Seed operator-curated campus facts into the knowledge store.

Usage:
    cd backend
    python -m campusqa.db.seed_knowledge [path/to/knowledge.json]

The file holds a JSON array of strings. Entries already present verbatim are
skipped, so the script can be re-run.
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List

from campusqa.services.approval_service import get_approval_promoter

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DEFAULT_KNOWLEDGE_FILE = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "../../knowledge.json")
)


def load_entries(path: str) -> List:
    with open(path, "r", encoding="utf-8") as f:
        entries = json.load(f)
    if not isinstance(entries, list):
        raise ValueError(f"{path} must contain a JSON array of strings")
    return entries


async def seed(path: str) -> int:
    entries = load_entries(path)
    if not entries:
        logger.info(f"{path} is empty. Nothing to seed.")
        return 0

    logger.info(f"Found {len(entries)} entries in {path}")
    report = await get_approval_promoter().seed(entries)
    logger.info(f"Done! {report.inserted} inserted, {report.skipped} skipped, {report.failed} failed.")
    return 1 if report.failed else 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed the campus knowledge store")
    parser.add_argument("path", nargs="?", default=DEFAULT_KNOWLEDGE_FILE)
    args = parser.parse_args(argv)
    try:
        return asyncio.run(seed(args.path))
    except Exception as e:
        logger.error(f"Seed script failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
