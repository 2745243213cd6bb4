"""
Rule-based résumé sectioning.
Splits raw résumé text into an ordered, flat list of titled sections.

Heading detection
• known heading: the whole line (minus decoration such as '##', '==', ':')
  matches a synonym from CANONICAL_SECTIONS, case-insensitively. Bullet
  lines never count, so "- Languages" stays a skills item.
• generic heading: preceded by a blank line, not the first line of the
  document (that is the candidate's name), 1-4 words, ≤ 32 chars, no digits,
  no separators like , ; | @ ( ) /, no trailing punctuation, and either
  mostly upper case (≥ 80 % of letters) or Title Case. Title Case only counts
  after a custom heading; in the preamble such lines are job titles, inside
  a known section they are employers, schools or project names.
  An all-caps employer (GOOGLE) after a blank line inside Experience still
  opens its own section. Dropping all-caps matching there would also lose
  unlisted headings such as LEADERSHIP that follow a known section.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Tuple

from resume_tailor.cleaner import (
    heading_key,
    is_blank,
    is_bullet,
    normalise_text,
    slugify,
    strip_decoration,
    trim_block,
    unique_id,
)
from resume_tailor.schema_resume import (
    CANONICAL_SECTIONS,
    FALLBACK_ID,
    FALLBACK_TITLE,
    PREAMBLE_ID,
    PREAMBLE_TITLE,
    SYNONYM_TO_ID,
    ResumeSection,
)

logger = logging.getLogger(__name__)

MAX_HEADING_WORDS = 4
MAX_HEADING_CHARS = 32
UPPER_RATIO = 0.8

FORBIDDEN = set(",;|@()[]{}<>/\\")
TRAILING = ".,;:!?"
CONNECTIVES = {"and", "of", "the", "&", "for", "in"}

# (canonical id or None for custom headings, title, body lines)
Block = Tuple[Optional[str], str, List[str]]


def parse_resume_text(raw: str) -> List[ResumeSection]:
    text = normalise_text(raw)
    if not text.strip():
        return []
    lines = text.split("\n")
    first = next(i for i, ln in enumerate(lines) if not is_blank(ln))

    preamble: List[str] = []
    blocks: List[Block] = []
    buf = preamble
    current: Optional[str] = None

    # section dispatcher
    for i, ln in enumerate(lines):
        sid = None if is_bullet(ln) else known_heading(ln)
        # Title Case only after a custom heading; before it lines are job titles
        if sid is None and i != first and is_blank(lines[i - 1]) \
                and looks_like_heading(ln, title_case=bool(blocks) and current is None):
            sid = ""
        if sid is None:
            buf.append(ln)
            continue
        current = sid or None
        buf = []
        blocks.append((current, strip_decoration(ln), buf))

    if not blocks:
        logger.info("No headings found; returning the whole text as one section")
        return [ResumeSection(id=FALLBACK_ID, title=FALLBACK_TITLE, content=text.strip())]

    out: Dict[str, ResumeSection] = {}
    if head := trim_block(preamble):
        out[PREAMBLE_ID] = ResumeSection(id=PREAMBLE_ID, title=PREAMBLE_TITLE, content=head)
    for sid, title, body in blocks:
        _flush(sid, title, body, out)

    logger.info("Parsed %d sections: %s", len(out), ", ".join(out))
    return list(out.values())


# ───────────────────────────────────────── helpers ──
def known_heading(line: str) -> Optional[str]:
    """Canonical id when the whole line is a known section title."""
    return SYNONYM_TO_ID.get(heading_key(line))


def looks_like_heading(line: str, title_case: bool = True) -> bool:
    s = line.strip()
    if not s or len(s) > MAX_HEADING_CHARS or is_bullet(line):
        return False
    if s[-1] in TRAILING or any(ch.isdigit() or ch in FORBIDDEN for ch in s):
        return False
    letters = [ch for ch in s if ch.isalpha()]
    tokens = s.split()
    if len(letters) < 3 or len(tokens) > MAX_HEADING_WORDS:
        return False
    if sum(ch.isupper() for ch in letters) / len(letters) >= UPPER_RATIO:
        return True
    return title_case and all(
        tok.lower() in CONNECTIVES or tok[0].isupper() for tok in tokens
    )


def _flush(sid: Optional[str], title: str, body: List[str], out: Dict[str, ResumeSection]):
    content = trim_block(body)
    if sid and sid in out:
        # repeated heading: keep the first position, append the new block
        prev = out[sid]
        joined = "\n\n".join(part for part in (prev.content, content) if part)
        out[sid] = prev.model_copy(update={"content": joined})
        return
    if not sid:
        # canonical ids stay reserved so a later known heading can still claim them
        sid = unique_id(slugify(title), set(out) | set(CANONICAL_SECTIONS))
    out[sid] = ResumeSection(id=sid, title=title, content=content)
