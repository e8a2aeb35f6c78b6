"""Fill in missing descriptions and tags in ``templates/index.json``.

Usage:
    python -m scripts.annotate_templates
    python -m scripts.annotate_templates --model openai/gpt-4.1 --delay 1.2
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from config.llm_config import LLMConfig
from config.settings import get_settings
from errors import WorkflowAssistantError
from services.llm_service import LLMService
from services.template_annotator import ANNOTATION_LLM_CONFIG, annotate_templates
from services.template_ingest import write_template_index
from services.template_store import load_template_index

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--index", type=Path, default=settings.template_index_path)
    parser.add_argument("--model", default=settings.annotation_model)
    parser.add_argument("--delay", type=float, default=settings.annotation_batch_delay,
                        help="seconds to wait between model calls")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    llm = LLMService(config=ANNOTATION_LLM_CONFIG.merge(LLMConfig(model=args.model)))
    try:
        llm.ensure_configured()
        templates = load_template_index(args.index)
    except WorkflowAssistantError as exc:
        logger.error("%s", exc)
        return 1

    annotated, updated = annotate_templates(templates, llm, delay=args.delay)
    write_template_index(annotated, args.index)
    logger.info("Annotated %d templates. Updated file: %s", updated, args.index)
    return 0


if __name__ == "__main__":
    sys.exit(main())
