"""
Article ingestion into the vector index.

Fetching and scraping happen elsewhere; this module takes already-extracted
articles, cleans and truncates them, and feeds them through
``VectorIndex.add_document``.
"""

import json
import logging
import re
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from pydantic import BaseModel, ValidationError

from news_rag.exceptions import NewsRagError
from news_rag.models import utc_now_iso
from news_rag.vector_index import VectorIndex

logger = logging.getLogger(__name__)

MAX_TITLE_CHARS = 200
MAX_TEXT_CHARS = 1500
MIN_TEXT_CHARS = 100

_WHITESPACE = re.compile(r"\s+")


class RawArticle(BaseModel):
    """An extracted article as produced by a crawler."""

    title: str
    text: str
    url: Optional[str] = None
    source: Optional[str] = None
    published: Optional[str] = None


@dataclass
class IngestionReport:
    ingested: int = 0
    skipped: int = 0
    failures: List[dict] = field(default_factory=list)
    points_count: Optional[int] = None


def clean_text(text: str, limit: int) -> str:
    """Collapse whitespace and cut to ``limit`` characters."""
    return _WHITESPACE.sub(" ", text).strip()[:limit]


def prepare_article(article: RawArticle) -> Optional[dict]:
    """
    Normalize one article for indexing.

    Returns:
        ``{"text": ..., "metadata": {...}}``, or None if the article has no
        title or too little text to be useful
    """
    title = clean_text(article.title, MAX_TITLE_CHARS)
    content = clean_text(article.text, MAX_TEXT_CHARS)

    if not title or len(content) <= MIN_TEXT_CHARS:
        return None

    ingested_at = utc_now_iso()
    return {
        "text": f"{title}. {content}",
        "metadata": {
            "title": title,
            "url": article.url,
            "source": article.source,
            "published": article.published or ingested_at,
            "ingestedAt": ingested_at,
        },
    }


def read_articles(path: Path) -> Iterator[RawArticle]:
    """Yield articles from a JSON Lines file, skipping malformed lines."""
    with open(path, encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                yield RawArticle.model_validate(json.loads(line))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Skipping line {line_number} of {path}: {e}")


async def ingest_articles(
    index: VectorIndex, articles: Iterable[RawArticle], target: int = 50
) -> IngestionReport:
    """
    Index articles until ``target`` have been stored.

    Per-article failures are recorded in the report and do not stop the run.
    """
    await index.initialize()
    report = IngestionReport()

    for article in articles:
        if report.ingested >= target:
            logger.info(f"Reached target of {target} articles")
            break

        prepared = prepare_article(article)
        if prepared is None:
            report.skipped += 1
            logger.info(f"Article skipped, insufficient content: '{article.title[:50]}'")
            continue

        try:
            await index.add_document(str(uuid.uuid4()), prepared["text"], prepared["metadata"])
        except NewsRagError as e:
            logger.error(f"Failed to add article '{article.title[:50]}': {e}")
            report.failures.append({"title": article.title, "error": str(e)})
            continue

        report.ingested += 1
        logger.info(f"Ingested article {report.ingested}: '{prepared['metadata']['title'][:50]}'")

    try:
        info = await index.get_collection_info()
        report.points_count = info.points_count
    except NewsRagError as e:
        logger.warning(f"Could not get collection info: {e}")

    logger.info(
        f"Ingestion complete: {report.ingested} ingested, "
        f"{report.skipped} skipped, {len(report.failures)} failed"
    )
    return report
