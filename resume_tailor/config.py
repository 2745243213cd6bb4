"""
Configuration settings for the resume-tailor application.

This file contains configuration for the LLM providers, upload limits and
logging. Every value can be overridden from the environment or a `.env` file.
"""

from dotenv import load_dotenv
load_dotenv()          # ← must be before os.getenv(...)
import logging
import os
import sys

# LLM Provider Configuration
# Set to "ollama" or "openai"
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").lower()

# Model Configuration
# For OpenAI: use models like "gpt-4o", "gpt-4o-mini", etc.
# For Ollama: use models like "llama3.1:8b", "mistral:7b", etc.
DEFAULT_MODEL = {
    "openai": "gpt-4o",
    "ollama": "llama3.1:8b",
}
LLM_MODEL = os.getenv("LLM_MODEL")  # overrides DEFAULT_MODEL when set

# OpenAI Configuration
# The key is checked when the OpenAI client is built, not at import time.
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL_PARAMS = {
    "temperature": float(os.getenv("OPENAI_TEMPERATURE", "0.7")),
    "max_tokens": int(os.getenv("OPENAI_MAX_TOKENS", "2048")),
}

# Ollama Configuration
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

# Upper bound for a single text-generation call; a hung call fails instead of
# blocking the suggestion pass forever.
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

# Upload limits
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "5"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def get_model_for_provider(provider: str = None) -> str:
    """Get the model to use for the specified provider."""
    if LLM_MODEL:
        return LLM_MODEL
    provider = provider or LLM_PROVIDER
    return DEFAULT_MODEL.get(provider, "gpt-4o")


def setup_logging():
    logging.basicConfig(
        level=LOG_LEVEL,
        stream=sys.stdout,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
