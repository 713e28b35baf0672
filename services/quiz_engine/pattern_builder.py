# services/quiz_engine/pattern_builder.py
# Generates quiz patterns for roadmaps that no existing pattern suggests yet.

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .models import CareerSuggestion, QuizMappings, QuizPattern, QuizType

logger = logging.getLogger(__name__)


class RoadmapDescriptor(BaseModel):
    slug: Optional[str] = None
    name: str
    category: Optional[str] = "Other"
    description: str = ""
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags_to_empty(cls, value):
        return value or []


def _category_of(roadmap: RoadmapDescriptor) -> str:
    return (roadmap.category or "Other").lower()


def _classify(roadmap: RoadmapDescriptor) -> str:
    """Buckets a roadmap into tech, creative, business, health or general."""
    category = _category_of(roadmap)
    tags = roadmap.tags
    if "tech" in category or "engineering" in tags:
        return "tech"
    if "creative" in category or "design" in tags:
        return "creative"
    if "business" in category or "management" in tags:
        return "business"
    if "health" in category or "medical" in tags:
        return "health"
    return "general"


STANDARD_PATTERNS: Dict[str, Dict[str, str]] = {
    "tech": {
        "role": "The analyst, focusing on data and logic.",
        "subject": "Mathematics or Physics",
    },
    "creative": {
        "role": "The creative one, coming up with new ideas.",
        "subject": "Art, Music, or Literature",
    },
    "business": {
        "role": "The leader, making decisions and delegating tasks.",
        "subject": "Business Studies or Economics",
    },
    "health": {
        "role": "The supporter, ensuring everyone is working well together.",
        "subject": "Biology or Chemistry",
    },
    "general": {
        "priority": "Continuous learning and intellectual challenges.",
    },
}

LONG_PATTERN_DEFAULTS: Dict[str, str] = {
    "problemSolving": "Break it down logically and find a solution.",
    "workStyle": "Flexible and adaptable.",
    "ambition": "To become an expert in my field.",
    "workWith": "Ideas and concepts.",
}

LONG_PATTERN_OVERRIDES: Dict[str, Dict[str, str]] = {
    "tech": {
        "problemSolving": "Analyze data and use logic to solve complex problems.",
        "workStyle": "Independent and focused.",
        "workWith": "Code, data, and technology.",
    },
    "business": {
        "problemSolving": "Collaborate with teams to find strategic solutions.",
        "workStyle": "Collaborative and leadership-oriented.",
        "workWith": "People and business strategy.",
        "ambition": "To lead a team or organization.",
    },
    "creative": {
        "problemSolving": "Think outside the box and brainstorm innovative ideas.",
        "workStyle": "Creative and free-flowing.",
        "workWith": "Visuals, stories, and artistic concepts.",
    },
    "health": {
        "problemSolving": "Use empathy and knowledge to help others.",
        "workStyle": "Compassionate and service-oriented.",
        "workWith": "Patients and healthcare teams.",
        "impact": "Directly improving people's lives.",
    },
}


def _pattern_suffix(slug: str) -> str:
    return slug.replace("-", "_")


def generate_standard_pattern(roadmap: RoadmapDescriptor) -> QuizPattern:
    category = _category_of(roadmap)
    first_tag = roadmap.tags[0] if roadmap.tags else "diverse fields"
    return QuizPattern(
        id=f"generated_{_pattern_suffix(roadmap.slug)}",
        quiz_type=QuizType.STANDARD,
        pattern=dict(STANDARD_PATTERNS[_classify(roadmap)]),
        suggestions=[
            CareerSuggestion(
                career=roadmap.name,
                description=roadmap.description,
                reasoning=f"Based on your interest in {category} and {first_tag}, this career offers excellent growth.",
                roadmap_path=roadmap.slug,
            )
        ],
    )


def generate_long_pattern(roadmap: RoadmapDescriptor) -> QuizPattern:
    pattern = dict(LONG_PATTERN_DEFAULTS)
    pattern.update(LONG_PATTERN_OVERRIDES.get(_classify(roadmap), {}))
    return QuizPattern(
        id=f"generated_long_{_pattern_suffix(roadmap.slug)}",
        quiz_type=QuizType.LONG,
        pattern=pattern,
        suggestions=[
            CareerSuggestion(
                career=roadmap.name,
                description=roadmap.description,
                reasoning=(
                    f"Your {pattern['workStyle']} style and interest in working with "
                    f"{pattern['workWith']} make this career a perfect match."
                ),
                roadmap_path=roadmap.slug,
            )
        ],
    )


def _references_roadmap(patterns: List[QuizPattern], slug: str) -> bool:
    return any(s.roadmap_path == slug for p in patterns for s in p.suggestions)


def build_quiz_patterns(mappings: QuizMappings, roadmaps: List[RoadmapDescriptor]) -> int:
    """
    Adds a standard and a long pattern for every roadmap not yet referenced by
    any suggestion in that section. Mutates mappings; returns the number added.
    """
    added = 0
    for roadmap in roadmaps:
        if not roadmap.slug:
            logger.warning(f"Skipping roadmap without slug: {roadmap.name}")
            continue

        if not _references_roadmap(mappings.standard.patterns, roadmap.slug):
            logger.info(f"Generating standard pattern for: {roadmap.name}")
            mappings.standard.patterns.append(generate_standard_pattern(roadmap))
            added += 1

        if not _references_roadmap(mappings.long.patterns, roadmap.slug):
            logger.info(f"Generating long pattern for: {roadmap.name}")
            mappings.long.patterns.append(generate_long_pattern(roadmap))
            added += 1

    return added


def load_roadmap_descriptors(roadmaps_dir: Union[str, Path]) -> List[RoadmapDescriptor]:
    """Reads every *.json roadmap in a directory; the file name is the default slug."""
    roadmaps_dir = Path(roadmaps_dir)
    descriptors = []
    for path in sorted(roadmaps_dir.glob("*.json")):
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        descriptor = RoadmapDescriptor.model_validate(data)
        if not descriptor.slug:
            descriptor.slug = path.stem
        descriptors.append(descriptor)
    logger.info(f"Found {len(descriptors)} roadmaps in {roadmaps_dir}")
    return descriptors
