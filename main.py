import argparse
import asyncio
import logging
import sys
from pathlib import Path

from src.fontselect.app import FontSelectApp
from src.fontselect.config import config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Select the default sans and serif fonts that best match a scanned document",
    )
    parser.add_argument("pages", nargs="+", type=Path, help="Page descriptor JSON files, in page order")
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Also re-check optimized fonts and fall back to raw ones on regression",
    )
    parser.add_argument(
        "--word-budget",
        type=int,
        default=None,
        metavar="N",
        help=f"Words examined per candidate (default: {config.word_budget})",
    )
    return parser.parse_args()


def main():
    """
    The main entry point for FontSelect.

    Loads fonts as configured in config.ini, runs default font selection over
    the given pages and logs the chosen families.
    """
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    app = FontSelectApp.from_config(config)
    if args.word_budget is not None:
        app.selector.word_budget = args.word_budget
        app.validator.word_budget = args.word_budget

    asyncio.run(app.run(args.pages, validate=args.validate))
    for font_class, family_name in app.default_family_names().items():
        print(f"{font_class}: {family_name}")
    sys.exit(0)


if __name__ == '__main__':
    main()
