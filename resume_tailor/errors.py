"""
Error taxonomy for the upload → parse → suggest pipeline.

Every exception carries a message that can be shown to the end user as is.
"""


class ResumeTailorError(Exception):
    """Base class for all domain errors."""


# ───────────────────────────────────────── upload / extraction ──
class UnsupportedFormat(ResumeTailorError):
    """The declared MIME type is not one of the accepted résumé formats."""


class FileTooLarge(ResumeTailorError):
    """The upload exceeds the size limit; raised before reading any bytes."""


class ExtractionFailure(ResumeTailorError):
    """The file could not be decoded (corrupt, encrypted, empty, bad encoding)."""


# ───────────────────────────────────────── suggestions ──
class SuggestionFailure(ResumeTailorError):
    """One section of a bulk pass failed; the pass itself carries on."""

    def __init__(self, section_id: str, message: str):
        super().__init__(message)
        self.section_id = section_id


class GenerationFailure(ResumeTailorError):
    """A targeted rewrite failed; the section keeps its previous content."""


class UnknownSection(ResumeTailorError, KeyError):
    """No section with the requested id exists."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


# ───────────────────────────────────────── session ──
class MissingSessionState(ResumeTailorError):
    """A pipeline stage was entered without the state it needs."""


class MalformedSessionState(ResumeTailorError):
    """A persisted blob could not be read back."""
