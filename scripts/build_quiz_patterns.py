"""
Adds generated quiz patterns for roadmaps that the mappings file does not cover yet.

Usage: python -m scripts.build_quiz_patterns --roadmaps data/roadmaps --mappings data/quiz-mappings.json
"""
import argparse
import logging
from pathlib import Path

from services.quiz_engine.loader import load_quiz_mappings_from_file, save_quiz_mappings_to_file
from services.quiz_engine.models import MappingsValidationError, QuizMappings
from services.quiz_engine.pattern_builder import build_quiz_patterns, load_roadmap_descriptors
from src.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--roadmaps", default="data/roadmaps", help="Directory of roadmap *.json files")
    parser.add_argument("--mappings", default="data/quiz-mappings.json", help="Quiz mappings file to update")
    args = parser.parse_args()
    setup_logging(json_logs=False)

    roadmaps_dir = Path(args.roadmaps)
    if not roadmaps_dir.is_dir():
        logger.error(f"Roadmaps directory not found: {roadmaps_dir}")
        return 1

    mappings_path = Path(args.mappings)
    mappings = QuizMappings()
    if mappings_path.exists():
        try:
            mappings = load_quiz_mappings_from_file(mappings_path)
        except MappingsValidationError as e:
            logger.warning(f"Could not parse existing mappings, starting fresh: {e}")

    added = build_quiz_patterns(mappings, load_roadmap_descriptors(roadmaps_dir))
    save_quiz_mappings_to_file(mappings, mappings_path)
    logger.info(f"Quiz patterns build complete. Added {added} new patterns.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
