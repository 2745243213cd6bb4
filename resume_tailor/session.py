"""
Session state for the upload → job description → editor → templates flow.

State lives in a plain string-keyed mapping (st.session_state in the app,
a dict in tests). It is read once when a page is entered and written only at
explicit transition points.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Any, List, MutableMapping, Optional

from pydantic import BaseModel

from resume_tailor.errors import MalformedSessionState, UnknownSection
from resume_tailor.extractor import extract_text_from_file
from resume_tailor.parser_rule import parse_resume_text
from resume_tailor.schema_resume import ResumeSection, sections_from_json, sections_to_json
from resume_tailor.suggestions import rewrite_section

logger = logging.getLogger(__name__)

KEY_FILE_NAME = "resumeFileName"
KEY_TEXT = "resumeText"
KEY_SECTIONS = "resumeSections"
KEY_JOB = "jobDescription"


class Stage(str, Enum):
    UPLOAD = "upload"
    JOB_DESCRIPTION = "job_description"
    EDITOR = "editor"
    TEMPLATES = "templates"


def _text(storage: MutableMapping[str, Any], key: str) -> Optional[str]:
    value = storage.get(key)
    return value if isinstance(value, str) and value.strip() else None


class TailorSession(BaseModel):
    file_name: Optional[str] = None
    raw_text: Optional[str] = None
    sections: List[ResumeSection] = []
    job_description: Optional[str] = None

    # ───────────────────────────────────── loading ──
    @classmethod
    def load(cls, storage: MutableMapping[str, Any]) -> "TailorSession":
        """Read all slots; a missing or broken section blob is rebuilt from the raw text."""
        raw_text = _text(storage, KEY_TEXT)
        blob = storage.get(KEY_SECTIONS)
        sections: List[ResumeSection] = []
        if blob:
            try:
                sections = sections_from_json(blob)
            except MalformedSessionState as exc:
                logger.warning("Discarding saved sections: %s", exc)
        if not sections and raw_text:
            sections = parse_resume_text(raw_text)
        return cls(
            file_name=_text(storage, KEY_FILE_NAME),
            raw_text=raw_text,
            sections=sections,
            job_description=_text(storage, KEY_JOB),
        )

    # ───────────────────────────────────── navigation ──
    def redirect_for(self, stage: Stage) -> Optional[Stage]:
        """The earlier stage to send the user to, or None when `stage` may be shown."""
        if stage is Stage.UPLOAD:
            return None
        if not self.file_name or not self.raw_text:
            return Stage.UPLOAD
        if stage is Stage.JOB_DESCRIPTION:
            return None
        if not self.job_description:
            return Stage.JOB_DESCRIPTION
        if stage is Stage.TEMPLATES and not self.sections:
            return Stage.EDITOR
        return None

    # ───────────────────────────────────── writes ──
    def save_upload(self, storage: MutableMapping[str, Any]) -> None:
        storage[KEY_FILE_NAME] = self.file_name
        storage[KEY_TEXT] = self.raw_text
        storage[KEY_SECTIONS] = sections_to_json(self.sections)

    def save_job_description(self, storage: MutableMapping[str, Any], job_description: str) -> None:
        self.job_description = job_description.strip() or None
        storage[KEY_JOB] = self.job_description or ""

    def save_sections(self, storage: MutableMapping[str, Any]) -> None:
        storage[KEY_SECTIONS] = sections_to_json(self.sections)

    # ───────────────────────────────────── edits ──
    def update_section_content(self, section_id: str, content: str) -> None:
        for i, section in enumerate(self.sections):
            if section.id == section_id:
                self.sections[i] = section.model_copy(update={"content": content})
                return
        raise UnknownSection(f"No section with id {section_id!r}.")

    def improve_section(self, section_id: str, instruction: str = "", model: str | None = None) -> str:
        """Rewrite one section in place; a blank instruction uses the default one."""
        self.sections = rewrite_section(
            self.sections, section_id, self.job_description, instruction=instruction, model=model
        )
        return next(s.content for s in self.sections if s.id == section_id)

    def resume_as_text(self) -> str:
        blocks = [f"{s.title}\n{s.content}".strip() for s in self.sections]
        return "\n\n".join(b for b in blocks if b) + "\n"


def process_upload(storage: MutableMapping[str, Any], upload) -> TailorSession:
    """Extract → parse → persist. Extraction errors propagate to the caller."""
    raw_text = extract_text_from_file(upload)
    sections = parse_resume_text(raw_text)
    session = TailorSession(
        file_name=upload.name,
        raw_text=raw_text,
        sections=sections,
        job_description=_text(storage, KEY_JOB),
    )
    session.save_upload(storage)
    logger.info("Stored %s with %d sections", upload.name, len(sections))
    return session
