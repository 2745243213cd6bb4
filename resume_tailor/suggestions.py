"""
LLM-backed suggestions for résumé sections.

• Bulk pass: one call per section, strictly one after another. A failing
  section gets a placeholder and the pass carries on.
• Targeted rewrite: replaces one section's content, guided by an optional
  user instruction.

Neither operation mutates the sections it is given; both return new ones.
"""

from __future__ import annotations
import logging
import textwrap
from typing import Callable, List, Optional

from pydantic import BaseModel

from resume_tailor.errors import (
    GenerationFailure,
    MissingSessionState,
    SuggestionFailure,
    UnknownSection,
)
from resume_tailor.llm_client import generate_text
from resume_tailor.schema_resume import ResumeSection

logger = logging.getLogger(__name__)

SUGGESTION_FAILED = "Failed to generate suggestions for this section. Please try again."
DEFAULT_INSTRUCTION = 'Improve this "{title}" section to better match the job description'

_SYSTEM_PROMPT_SUGGEST = (
    "You are an expert resume writer who helps job seekers tailor their resumes "
    "to specific job descriptions. Provide specific, actionable suggestions to "
    "improve resume sections."
)

_SYSTEM_PROMPT_REWRITE = (
    "You are an expert resume writer who helps job seekers tailor their resumes "
    "to specific job descriptions. Provide complete, well-formatted content that "
    "can be used directly in a resume."
)

_SUGGEST_TEMPLATE = textwrap.dedent(
    """\
    I have a resume section titled "{title}" with the following content:

    {content}

    I'm applying for a job with this description:
    {job_description}

    Please suggest improvements to make this section more tailored to the job description. Focus on highlighting relevant skills and experiences, using keywords from the job description, and quantifying achievements where possible. Provide the suggestions in a clear, concise format."""
)

_REWRITE_TEMPLATE = textwrap.dedent(
    """\
    I have a resume section titled "{title}" with the following content:

    {content}

    I'm applying for a job with this description:
    {job_description}

    User instruction: {instruction}

    Please rewrite this section to be more tailored to the job description. Focus on highlighting relevant skills and experiences, using keywords from the job description, and quantifying achievements where possible. Provide the complete rewritten section, not just suggestions."""
)


class SectionOutcome(BaseModel):
    section_id: str
    ok: bool
    error: Optional[str] = None


class SuggestionPass(BaseModel):
    sections: List[ResumeSection]
    outcomes: List[SectionOutcome]

    @property
    def failed(self) -> List[str]:
        return [o.section_id for o in self.outcomes if not o.ok]


def build_suggestion_prompt(section: ResumeSection, job_description: str) -> str:
    return _SUGGEST_TEMPLATE.format(
        title=section.title, content=section.content, job_description=job_description
    )


def build_rewrite_prompt(section: ResumeSection, job_description: str, instruction: str = "") -> str:
    instruction = instruction.strip() or DEFAULT_INSTRUCTION.format(title=section.title)
    return _REWRITE_TEMPLATE.format(
        title=section.title,
        content=section.content,
        job_description=job_description,
        instruction=instruction,
    )


def _require_job_description(job_description: str | None) -> str:
    if not job_description or not job_description.strip():
        raise MissingSessionState("Please provide a job description first.")
    return job_description.strip()


def _suggest_one(section: ResumeSection, job_description: str, model: str | None) -> str:
    try:
        text = generate_text(
            _SYSTEM_PROMPT_SUGGEST, build_suggestion_prompt(section, job_description), model=model
        )
    except Exception as exc:
        raise SuggestionFailure(section.id, f"{type(exc).__name__}: {exc}") from exc
    if not text or not text.strip():
        raise SuggestionFailure(section.id, "The model returned an empty reply.")
    return text


def generate_suggestions(
    sections: List[ResumeSection],
    job_description: str,
    model: str | None = None,
    status_callback: Callable[[str], None] | None = None,
) -> SuggestionPass:
    """
    Attach a suggestion to every section, one section at a time.

    Args:
        sections: the current sections; left untouched.
        job_description: the target job description.
        model: model override, defaults to the configured one.
        status_callback: optional function called with progress messages.
    """
    job_description = _require_job_description(job_description)
    updated: List[ResumeSection] = []
    outcomes: List[SectionOutcome] = []

    for n, section in enumerate(sections, 1):
        if status_callback:
            status_callback(f"🤖 {n}/{len(sections)}: suggesting improvements for {section.title}...")
        try:
            text = _suggest_one(section, job_description, model)
            outcomes.append(SectionOutcome(section_id=section.id, ok=True))
        except SuggestionFailure as exc:
            logger.warning("Suggestion failed for section %s: %s", exc.section_id, exc)
            text = SUGGESTION_FAILED
            outcomes.append(SectionOutcome(section_id=section.id, ok=False, error=str(exc)))
            if status_callback:
                status_callback(f"⚠️ Could not generate suggestions for {section.title}.")
        updated.append(section.model_copy(update={"suggestions": text}))

    result = SuggestionPass(sections=updated, outcomes=outcomes)
    logger.info(
        "Suggestion pass finished: %d sections, %d failed", len(updated), len(result.failed)
    )
    if status_callback:
        status_callback("✅ Suggestions ready.")
    return result


def rewrite_section(
    sections: List[ResumeSection],
    section_id: str,
    job_description: str,
    instruction: str = "",
    model: str | None = None,
) -> List[ResumeSection]:
    """
    Return a copy of `sections` in which only `section_id` has rewritten content.

    Raises UnknownSection, MissingSessionState or GenerationFailure.
    """
    job_description = _require_job_description(job_description)
    index = next((i for i, s in enumerate(sections) if s.id == section_id), None)
    if index is None:
        raise UnknownSection(f"No section with id {section_id!r}.")
    section = sections[index]

    try:
        text = generate_text(
            _SYSTEM_PROMPT_REWRITE,
            build_rewrite_prompt(section, job_description, instruction),
            model=model,
        )
    except Exception as exc:
        logger.exception("Rewrite failed for section %s", section_id)
        raise GenerationFailure("Failed to generate AI suggestions. Please try again.") from exc
    if not text or not text.strip():
        raise GenerationFailure("Failed to generate AI suggestions. Please try again.")

    updated = list(sections)
    updated[index] = section.model_copy(update={"content": text})
    logger.info("Rewrote section %s (%d chars)", section_id, len(text))
    return updated
