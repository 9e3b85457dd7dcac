"""Shared fixtures: configuration and logger for the bridge tests."""

import logging

import pytest

from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger

EMBED_DIMENSIONS = 4


@pytest.fixture
def env(monkeypatch):
    """Minimal environment for the Gemini clients and the in-process store."""
    values = {
        "EMBED_ENGINE": "gemini",
        "EMBED_GEMINI_API_KEY": "embed-key",
        "EMBED_DIMENSIONS": str(EMBED_DIMENSIONS),
        "LLM_ENGINE": "gemini",
        "LLM_GEMINI_API_KEY": "llm-key",
        "RAG_ENGINE": "memory",
    }
    for key, value in values.items():
        monkeypatch.setenv(key, value)
    for key in (
        "APP_CHUNK_SIZE", "APP_EMBED_CONCURRENCY", "APP_RETRIEVAL_TOP_K", "APP_REQUEST_TIMEOUT", "APP_SYSTEM_INSTRUCTION",
        "TOOL_ENGINES", "LLM_SAFETY_THRESHOLD", "LLM_CHAT_MODEL", "LLM_TOOL_MODEL", "EMBED_MODEL",
        "LLM_TEMPERATURE", "LLM_TOP_K", "LLM_TOP_P", "LLM_MAX_OUTPUT_TOKENS",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def helper_config(env) -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("rag_bridge.tests")))
