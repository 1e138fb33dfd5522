"""Convert markdown to a flat-mark document and back.

Usage:
    python -m marktree to-flat README.md > doc.json
    python -m marktree from-flat doc.json
"""

import argparse
import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from marktree.config import get_settings
from marktree.exceptions import ConversionError
from marktree.logging_config import configure_logging
from marktree.models import Node
from marktree.presets import flat_to_markdown_tree, markdown_to_flat


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="marktree", description=__doc__.splitlines()[0])
    parser.add_argument("--log-level", default=settings.log_level, help="loguru level (default: %(default)s)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    to_flat_parser = subparsers.add_parser("to-flat", help="Markdown file -> flat document JSON")
    to_flat_parser.add_argument("input", type=Path)

    from_flat_parser = subparsers.add_parser("from-flat", help="Flat document JSON -> nested tree JSON")
    from_flat_parser.add_argument("input", type=Path)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    text = args.input.read_text(encoding="utf-8")
    try:
        if args.command == "to-flat":
            result = markdown_to_flat(text, settings=settings)
        else:
            result = flat_to_markdown_tree(Node.model_validate_json(text), settings=settings)
    except (ConversionError, ValidationError) as e:
        logger.error(f"Conversion of {args.input} failed: {e}")
        return 1

    print(result.model_dump_json(indent=2, exclude_defaults=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
