import hashlib
import json
import re
from typing import Any, Dict, List, Union

Answers = Union[Dict[str, Any], List[Any]]


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _normalize_value(value: Any) -> str:
    return value.lower().strip() if isinstance(value, str) else _compact_json(value)


def compute_answers_hash(answers: Answers) -> str:
    """
    MD5 of the normalized answers. Key order and letter case/surrounding
    whitespace of string answers do not affect the hash.
    """
    if isinstance(answers, list):
        normalized = sorted(_normalize_value(answer) for answer in answers)
    else:
        normalized = [f"{key}:{_normalize_value(value)}" for key, value in sorted(answers.items())]
    return hashlib.md5(_compact_json(normalized).encode("utf-8")).hexdigest()


def answers_for_matching(answers: Answers) -> Dict[str, str]:
    """List answers are keyed q0..qN; non-string values are JSON-encoded."""
    items = enumerate(answers) if isinstance(answers, list) else answers.items()
    prefix = "q" if isinstance(answers, list) else ""
    return {
        f"{prefix}{key}": value if isinstance(value, str) else _compact_json(value)
        for key, value in items
    }


def roadmap_slug(name: str) -> str:
    """'Data Scientist' -> 'data-scientist'"""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
