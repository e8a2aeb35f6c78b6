"""Embed every template in ``templates/index.json`` into ``embeddings.json``.

Usage:
    python -m scripts.build_embeddings
    python -m scripts.build_embeddings --delay 0.5
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from config.settings import get_settings
from errors import WorkflowAssistantError
from services.embedding_provider import OpenAIEmbeddingProvider
from services.template_ingest import build_embeddings, write_embeddings
from services.template_store import load_template_index

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--index", type=Path, default=settings.template_index_path)
    parser.add_argument("--output", type=Path, default=settings.embeddings_path)
    parser.add_argument("--delay", type=float, default=settings.embedding_batch_delay,
                        help="seconds to wait between embedding calls")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    embedder = OpenAIEmbeddingProvider.from_settings(settings)
    if not embedder.is_configured:
        logger.error("OPENAI_API_KEY is not set. Please configure it in your .env file.")
        return 1

    try:
        templates = load_template_index(args.index)
    except WorkflowAssistantError as exc:
        logger.error("%s", exc)
        return 1

    records = asyncio.run(build_embeddings(templates, embedder, delay=args.delay))
    count = write_embeddings(records, args.output)
    logger.info("Wrote %d embeddings to %s", count, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
