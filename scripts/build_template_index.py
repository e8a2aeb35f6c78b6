"""Build ``templates/index.json`` from a folder of exported n8n workflows.

Usage:
    python -m scripts.build_template_index
    python -m scripts.build_template_index --root ./workflows --output templates/index.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from config.settings import get_settings
from services.template_ingest import collect_templates, write_template_index

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--root", type=Path, default=settings.templates_root,
                        help="folder containing <category>/*.json")
    parser.add_argument("--output", type=Path, default=settings.template_index_path)
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if not args.root.is_dir():
        logger.error("Template root %s does not exist", args.root)
        return 1

    count = write_template_index(collect_templates(args.root), args.output)
    logger.info("Wrote %d templates to %s", count, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
