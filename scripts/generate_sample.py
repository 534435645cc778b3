#!/usr/bin/env python
"""
Generate a sample shoot for testing.

Usage:
    python scripts/generate_sample.py [--output FILE] [--grid N] [--concept TEXT]
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from studiolens.core.config import Config
from studiolens.core.image_gen import generate_image
from studiolens.core.settings import GenerationSettings, history_label
from studiolens.utils.exceptions import StudioError


def main() -> None:
    """Generate a sample image."""
    parser = argparse.ArgumentParser(description="Generate a sample shoot")
    parser.add_argument(
        "--output",
        default="sample_output.png",
        help="Output filename (default: sample_output.png)"
    )
    parser.add_argument("--grid", type=int, default=1, help="Number of cuts (default: 1)")
    parser.add_argument(
        "--concept",
        default="Studio Clean",
        help="Concept/location preset or free text"
    )

    args = parser.parse_args()

    settings = GenerationSettings(concept=args.concept).resize(args.grid)
    print(f"Generating {history_label('standard', settings)}")
    print()

    config = Config.from_env()
    config.validate()

    try:
        result = generate_image(settings, config=config)
        result.save(args.output)

        print("✓ Image generated successfully!")
        print(f"  - Saved to: {args.output}")
        print(f"  - Generation time: {result.generation_time:.2f}s")
        print(f"  - Model: {result.model_used}")

    except StudioError as e:
        print(f"❌ Generation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
