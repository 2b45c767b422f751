"""
Generate 1024x1024 showcase icons for a short proof list of spells and items
through the OpenAI Images API, then update those records' img paths.

Requires OPENAI_API_KEY (environment or .env).
"""
import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from icongen.config import Settings, get_module_id
from icongen.core import ProofIconPipeline
from icongen.errors import ConfigurationError, IconGenError
from icongen.generator import OpenAIImageGenerator


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate proof icons for selected spells and items."
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Module root containing module.json and packs/ (default: current directory).",
    )
    parser.add_argument(
        "--model",
        default="gpt-image-1",
        help="OpenAI image model.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Only print what would be generated (same as DRYRUN=1).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    load_dotenv()

    args = parse_args(argv)
    try:
        settings = Settings.from_env(args.root)
        if args.dry_run:
            settings.dry_run = True
        if not settings.openai_api_key:
            raise ConfigurationError("Missing OPENAI_API_KEY env var.")

        module_id = get_module_id(settings, required=True)
        pipeline = ProofIconPipeline(
            settings=settings,
            generator=OpenAIImageGenerator(api_key=settings.openai_api_key, model=args.model),
            module_id=module_id,
        )
        pipeline.run()
    except IconGenError as err:
        print(f"\nFAILED: {err}", file=sys.stderr)
        sys.exit(1)

    print("\nDone. Commit the new icons/ and updated packs/*.db")


if __name__ == "__main__":
    main()
