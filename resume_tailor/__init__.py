"""Résumé Tailor: upload a résumé, tailor it to a job description section by section."""

__version__ = "0.1.0"
