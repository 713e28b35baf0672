import json

import pytest


@pytest.fixture
def minimal_mappings_data():
    """Provides a small but structurally valid mappings document."""
    return {
        "standard": {
            "patterns": [
                {
                    "id": "puzzles",
                    "pattern": {"activity": "Solving complex puzzles or math problems."},
                    "suggestions": [
                        {
                            "career": "Data Scientist",
                            "description": "Works with data.",
                            "reasoning": "You like puzzles.",
                            "roadmapPath": "data-scientist",
                        }
                    ],
                },
                {
                    "id": "art",
                    "pattern": {
                        "activity": "Creating art, music, or stories.",
                        "subject": "Art, Music, or Literature",
                    },
                    "suggestions": [
                        {
                            "career": "Graphic Designer",
                            "description": "Designs visuals.",
                            "reasoning": "You like art.",
                            "roadmapPath": "graphic-designer",
                        }
                    ],
                },
            ],
            "fallback": [
                {"career": "Generalist A", "description": "d", "reasoning": "r", "roadmapPath": "generalist-a"},
                {"career": "Generalist B", "description": "d", "reasoning": "r", "roadmapPath": "generalist-b"},
            ],
        },
        "long": {
            "patterns": [
                {
                    "id": "long_data",
                    "pattern": {"workWith": "Data and abstract concepts (numbers, code, theories)."},
                    "suggestions": [
                        {
                            "career": "Machine Learning Engineer",
                            "description": "Builds models.",
                            "reasoning": "You like data.",
                            "roadmapPath": "machine-learning-engineer",
                        }
                    ],
                }
            ],
            "fallback": [
                {"career": "Long Fallback", "description": "d", "reasoning": "r", "roadmapPath": "long-fallback"},
            ],
        },
    }


@pytest.fixture
def mappings_file(tmp_path, minimal_mappings_data):
    """Writes the minimal mappings to a temporary JSON file and returns its path."""
    path = tmp_path / "quiz-mappings.json"
    path.write_text(json.dumps(minimal_mappings_data), encoding="utf-8")
    return path
