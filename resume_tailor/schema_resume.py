"""
Résumé section model and the canonical section catalogue.
"""
from __future__ import annotations

import json
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from resume_tailor.errors import MalformedSessionState

# canonical id → heading synonyms (already normalised: lower case, "&" → "and")
CANONICAL_SECTIONS: Dict[str, Tuple[str, ...]] = {
    "summary": (
        "summary", "professional summary", "career summary", "executive summary",
        "profile", "professional profile", "personal profile",
        "objective", "career objective", "about me",
    ),
    "experience": (
        "experience", "work experience", "professional experience",
        "relevant experience", "work history", "employment history",
        "employment", "career history",
    ),
    "education": (
        "education", "academic background", "education and training",
        "academic history", "academics",
    ),
    "skills": (
        "skills", "technical skills", "key skills", "core skills",
        "core competencies", "competencies", "skills and abilities",
        "skills and expertise",
    ),
    "projects": ("projects", "personal projects", "key projects", "academic projects"),
    "certifications": (
        "certifications", "certificates",
        "licenses and certifications", "certifications and licenses",
    ),
    "awards": ("awards", "honors", "honours", "awards and honors", "achievements"),
    "languages": ("languages",),
    "volunteer": ("volunteer experience", "volunteering", "volunteer work"),
    "publications": ("publications",),
    "interests": ("interests", "hobbies", "hobbies and interests"),
}

SYNONYM_TO_ID: Dict[str, str] = {
    syn: sid for sid, syns in CANONICAL_SECTIONS.items() for syn in syns
}

FALLBACK_ID, FALLBACK_TITLE = "content", "Resume Content"
PREAMBLE_ID, PREAMBLE_TITLE = "header", "Contact Information"


class ResumeSection(BaseModel):
    id: str
    title: str
    content: str = ""
    suggestions: Optional[str] = None


def sections_to_json(sections: List[ResumeSection]) -> str:
    return json.dumps(
        [s.model_dump(exclude_none=True) for s in sections], ensure_ascii=False
    )


def sections_from_json(blob: str) -> List[ResumeSection]:
    """Read a persisted section list back; anything off raises MalformedSessionState."""
    try:
        data = json.loads(blob)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedSessionState(f"Saved sections are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise MalformedSessionState("Saved sections must be a JSON array.")
    try:
        sections = [ResumeSection.model_validate(item) for item in data]
    except ValidationError as exc:
        raise MalformedSessionState(f"Saved sections have an invalid shape: {exc}") from exc
    ids = [s.id for s in sections]
    if len(ids) != len(set(ids)):
        raise MalformedSessionState("Saved sections contain duplicate ids.")
    return sections
