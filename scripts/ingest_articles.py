#!/usr/bin/env python3
"""
Article Ingestion Tool

Loads extracted news articles from a JSON Lines file into the vector index.
Each line must carry at least ``title`` and ``text``; ``url``, ``source``
and ``published`` are optional.

Connection settings (Qdrant, embedding provider) come from the environment
or a ``.env`` file, see ``news_rag.config.Settings``.

Usage:
    python scripts/ingest_articles.py articles.jsonl

    # Stop after 20 articles
    python scripts/ingest_articles.py articles.jsonl --target 20

    # Drop the existing collection first
    python scripts/ingest_articles.py articles.jsonl --reset
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from news_rag.bootstrap import create_embedding, create_vector_store  # noqa: E402
from news_rag.config import Settings  # noqa: E402
from news_rag.exceptions import NewsRagError  # noqa: E402
from news_rag.ingestion import ingest_articles, read_articles  # noqa: E402
from news_rag.vector_index import VectorIndex  # noqa: E402

logger = logging.getLogger("news-ingestion")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest news articles into the vector index")
    parser.add_argument("path", type=Path, help="JSON Lines file of extracted articles")
    parser.add_argument("--target", type=int, default=50, help="Stop after this many articles")
    parser.add_argument("--reset", action="store_true", help="Recreate the collection first")
    return parser.parse_args()


async def run(args: argparse.Namespace) -> int:
    settings = Settings()
    index = VectorIndex(
        store=create_vector_store(settings),
        embedding=create_embedding(settings),
        vector_size=settings.VECTOR_SIZE,
        score_threshold=settings.SCORE_THRESHOLD,
    )

    try:
        if args.reset:
            await index.reset()
        report = await ingest_articles(index, read_articles(args.path), target=args.target)
    except NewsRagError as e:
        logger.error(f"Fatal error during ingestion: {e}")
        return 1
    finally:
        await index.shutdown()

    print(f"Successfully processed: {report.ingested} articles")
    print(f"Skipped (insufficient content): {report.skipped}")
    print(f"Failed: {len(report.failures)}")
    for failure in report.failures:
        print(f"  - {failure['title']}: {failure['error']}")
    if report.points_count is not None:
        print(f"Points in collection: {report.points_count}")
    return 0


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    args = parse_args()
    if not args.path.exists():
        logger.error(f"File not found: {args.path}")
        sys.exit(1)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
