"""
Generate 256x256 fantasy icons (no text) for every pack under packs/, save the
PNGs into icons/generated/{spells|items}/ and point each record's img at them.

Usage (project root):
    generate-icons-db

Environment (a local .env is honoured):
    SD_API=http://192.168.1.174:7860
    LIMIT=10
    OVERWRITE=0|1
    DRYRUN=0|1
"""
import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from icongen.config import Settings, get_module_id, parse_limit
from icongen.core import IconPipeline
from icongen.errors import IconGenError
from icongen.generator import A1111Generator


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate icons for every pack record and update their img paths."
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Module root containing module.json and packs/ (default: current directory).",
    )
    parser.add_argument("--sd-api", help="Base URL of the Stable Diffusion WebUI (overrides SD_API).")
    parser.add_argument("--limit", help="Maximum records to process per pack (overrides LIMIT).")
    parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Regenerate icons that already exist (same as OVERWRITE=1).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Only print what would be generated (same as DRYRUN=1).",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env(args.root)
    if args.sd_api:
        settings.sd_api = args.sd_api.rstrip("/")
    if args.limit is not None:
        settings.limit = parse_limit(args.limit)
    if args.overwrite:
        settings.overwrite = True
    if args.dry_run:
        settings.dry_run = True
    return settings


def main(argv: Optional[Sequence[str]] = None) -> None:
    # Pick up SD_API / LIMIT / ... from a local .env file if present.
    load_dotenv()

    args = parse_args(argv)
    try:
        settings = build_settings(args)
        module_id = get_module_id(settings)
        pipeline = IconPipeline(
            settings=settings,
            generator=A1111Generator(base_url=settings.sd_api),
            module_id=module_id,
        )
        pipeline.run()
    except IconGenError as err:
        print(f"\nFAILED: {err}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
