"""Shared fixtures for content pipeline tests."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from content_pipeline.services.llm_client import LLMClient
from content_pipeline.services.run_logger import RunLogger
from content_pipeline.services.web_search import WebSearchClient


@pytest.fixture
def mock_llm_client():
    """LLM client whose generate() is an AsyncMock."""
    client = MagicMock(spec=LLMClient)
    client.generate = AsyncMock()
    return client


@pytest.fixture
def mock_search_client():
    """Web search client whose search() is an AsyncMock."""
    client = MagicMock(spec=WebSearchClient)
    client.search = AsyncMock()
    return client


@pytest.fixture
def mock_run_logger():
    """Run logger recording append() calls."""
    run_logger = MagicMock(spec=RunLogger)
    run_logger.append = AsyncMock(return_value=None)
    return run_logger
