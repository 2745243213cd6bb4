"""
Shared text clean-ups used by the extractor and the section parser.
"""
from __future__ import annotations
import re, unicodedata
from typing import Iterable

_CID       = re.compile(r"\(cid:\d+\)")
_NEWLINES  = re.compile(r"\r\n?")
_SPACES    = re.compile(r"\s+")
_NON_SLUG  = re.compile(r"[^a-z0-9]+")
_DECOR     = "#*=_~-–—•|: \t"
_BULLET    = re.compile(r"^\s*(?:[-*+•▪◦●■►–—]|\d+[.)])\s")

# ───────────────────────────────────────── text ──
def normalise_text(raw: str) -> str:
    """Unify line endings, strip PDF glyph artefacts and odd spaces."""
    text = unicodedata.normalize("NFC", raw or "")
    text = _NEWLINES.sub("\n", text)
    text = _CID.sub("", text)
    return text.replace("\u00a0", " ").replace("\ufeff", "")

def is_blank(line: str) -> bool:
    return not line.strip()

def is_bullet(line: str) -> bool:
    return bool(_BULLET.match(line))

def trim_block(lines: Iterable[str]) -> str:
    """Join lines, dropping surrounding blank lines and whitespace only."""
    return "\n".join(lines).strip()

# ───────────────────────────────────────── headings ──
def strip_decoration(line: str) -> str:
    """'## Work Experience:' → 'Work Experience'"""
    return _SPACES.sub(" ", line.strip().strip(_DECOR)).strip()

def heading_key(line: str) -> str:
    """Lookup key for the synonym table: lower case, '&' spelled out."""
    key = strip_decoration(line).lower().replace("&", " and ")
    return _SPACES.sub(" ", key).strip()

def slugify(text: str, default: str = "other") -> str:
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    slug = _NON_SLUG.sub("-", ascii_text.lower()).strip("-")
    return slug or default

def unique_id(base: str, taken: set) -> str:
    """base, base-2, base-3, … whichever is free first."""
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"
