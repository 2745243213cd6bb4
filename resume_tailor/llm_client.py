"""
LLM client abstraction layer to support multiple providers.

This module provides a unified interface for different LLM providers,
making it easy to switch between the OpenAI API and a local Ollama server
while keeping the same interface for the rest of the application.

Calls are bounded by config.LLM_TIMEOUT_SECONDS and never retried here;
retrying is left to the user.
"""

from __future__ import annotations
import logging
import time
from typing import List, Dict
from abc import ABC, abstractmethod

from resume_tailor import config

try:
    from ollama import Client as OllamaAPI
except ImportError:
    OllamaAPI = None

try:
    from openai import OpenAI
except ImportError:
    OpenAI = None

logger = logging.getLogger(__name__)


class LLMResponse:
    """Unified response object for LLM responses."""

    def __init__(self, content: str):
        self.message = MessageContent(content)


class MessageContent:
    """Message content wrapper."""

    def __init__(self, content: str):
        self.content = content


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def chat(self, model: str, messages: List[Dict[str, str]]) -> LLMResponse:
        """Send a chat request to the LLM provider."""


class OllamaClient(LLMClient):
    """Ollama client implementation."""

    def __init__(self, host: str | None = None, timeout: float | None = None):
        if OllamaAPI is None:
            raise ImportError("ollama package is required for OllamaClient")
        self.client = OllamaAPI(
            host=host or config.OLLAMA_BASE_URL,
            timeout=timeout or config.LLM_TIMEOUT_SECONDS,
        )

    def chat(self, model: str, messages: List[Dict[str, str]]) -> LLMResponse:
        """Send a chat request to Ollama."""
        response = self.client.chat(model=model, messages=messages)
        return LLMResponse(response.message.content or "")


class OpenAIClient(LLMClient):
    """OpenAI client implementation."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        if OpenAI is None:
            raise ImportError("openai package is required for OpenAIClient")

        # Use provided API key or the configured one
        api_key = api_key or config.OPENAI_API_KEY
        if not api_key:
            raise ValueError("OpenAI API key is required. Set OPENAI_API_KEY environment variable or pass api_key parameter.")

        self.client = OpenAI(
            api_key=api_key,
            timeout=timeout or config.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )

    def chat(self, model: str, messages: List[Dict[str, str]]) -> LLMResponse:
        """Send a chat request to OpenAI."""
        response = self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=config.OPENAI_MODEL_PARAMS.get("temperature", 0.7),
            max_tokens=config.OPENAI_MODEL_PARAMS.get("max_tokens", 2048),
        )

        return LLMResponse(response.choices[0].message.content or "")


def get_llm_client(provider: str | None = None) -> LLMClient:
    """Factory function to get the appropriate LLM client based on configuration."""
    provider = (provider or config.LLM_PROVIDER).lower()

    if provider == "openai":
        return OpenAIClient()
    elif provider == "ollama":
        return OllamaClient()
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")


# Create a global client instance
_llm_client = None


def chat(model: str, messages: List[Dict[str, str]]) -> LLMResponse:
    """
    Unified chat function that works with any configured LLM provider.

    The provider client is created lazily on first use and reused afterwards.
    """
    global _llm_client
    if _llm_client is None:
        _llm_client = get_llm_client()

    return _llm_client.chat(model, messages)


def generate_text(system: str, prompt: str, model: str | None = None) -> str:
    """
    One system instruction + one user prompt in, generated text out.

    Any provider error propagates unchanged; callers decide how to surface it.
    """
    model = model or config.get_model_for_provider()
    messages = [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]
    t0 = time.monotonic()
    rsp = chat(model=model, messages=messages)
    logger.info(
        "LLM call to %s finished in %d ms", model, int((time.monotonic() - t0) * 1000)
    )
    return (rsp.message.content or "").strip()
