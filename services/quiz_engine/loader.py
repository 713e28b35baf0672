import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from services.quiz_engine.models import MappingsValidationError, QuizMappings, QuizPattern, QuizType

logger = logging.getLogger(__name__)


def _validate_patterns(raw_patterns: List[Any], quiz_type: QuizType) -> List[QuizPattern]:
    """Validates pattern entries one by one; a malformed entry is logged and dropped."""
    patterns = []
    for index, raw in enumerate(raw_patterns):
        try:
            patterns.append(QuizPattern.model_validate(raw))
        except ValidationError as e:
            pattern_id = raw.get("id", f"#{index}") if isinstance(raw, dict) else f"#{index}"
            logger.warning(f"Skipping invalid {quiz_type.value} pattern '{pattern_id}': {e}")
    return patterns


def load_quiz_mappings_data(data: Dict[str, Any]) -> QuizMappings:
    """
    Validates the raw dictionary data against the QuizMappings model
    and performs additional custom validations.

    Patterns are validated individually so one malformed entry does not take
    the rest of its section (or the fallback list) down with it. Each
    pattern's quiz type is taken from the section it sits in; a pattern that
    declares a different quizType is rejected.
    """
    sections: Dict[str, Any] = {}
    raw_patterns: Dict[QuizType, List[Any]] = {}
    for quiz_type in QuizType:
        section = data.get(quiz_type.value) or {}
        if not isinstance(section, dict):
            raise MappingsValidationError(f"Section '{quiz_type.value}' must be an object")
        patterns = section.get("patterns") or []
        if not isinstance(patterns, list):
            raise MappingsValidationError(f"Section '{quiz_type.value}' patterns must be a list")
        raw_patterns[quiz_type] = patterns
        sections[quiz_type.value] = {**section, "patterns": []}

    try:
        mappings = QuizMappings.model_validate(sections)
    except ValidationError as e:
        raise MappingsValidationError(f"Invalid quiz mappings: {e}") from e

    for quiz_type in QuizType:
        section = mappings.section(quiz_type)
        section.patterns = _validate_patterns(raw_patterns[quiz_type], quiz_type)
        pattern_ids = set()
        for pattern in section.patterns:
            if pattern.id in pattern_ids:
                raise MappingsValidationError(f"Duplicate pattern ID '{pattern.id}' in section '{quiz_type.value}'")
            pattern_ids.add(pattern.id)

            if pattern.quiz_type is None:
                pattern.quiz_type = quiz_type
            elif pattern.quiz_type != quiz_type:
                raise MappingsValidationError(
                    f"Pattern '{pattern.id}' declares quizType '{pattern.quiz_type.value}' "
                    f"but is listed under '{quiz_type.value}'"
                )
            # Empty constraint maps are allowed; they score 0 and never match.

    return mappings


def load_quiz_mappings_from_file(file_path: Union[str, Path]) -> QuizMappings:
    """
    Loads quiz mappings from a JSON (or YAML, by suffix) file, validates them,
    and returns a QuizMappings object.
    """
    path = Path(file_path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() in (".yml", ".yaml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except FileNotFoundError:
        raise MappingsValidationError(f"File not found: {path}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise MappingsValidationError(f"Error parsing mappings file {path}: {e}")

    if not isinstance(data, dict):
        raise MappingsValidationError(f"Mappings file is empty or invalid: {path}")

    return load_quiz_mappings_data(data)


def save_quiz_mappings_to_file(mappings: QuizMappings, file_path: Union[str, Path]) -> None:
    """Writes mappings back as indented JSON, replacing the file atomically."""
    path = Path(file_path)
    payload = mappings.model_dump(by_alias=True, mode="json")
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
