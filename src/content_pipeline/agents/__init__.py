"""
Agents for the content pipeline.

Four agents run in order to turn a requirements document into a blog post:
1. ResearcherAgent - Extracts key topics and researches them on the web
2. WriterAgent - Writes the draft (and revisions driven by fact-check feedback)
3. FactCheckerAgent - Checks the draft against the research
4. PolisherAgent - Final style pass without factual changes
"""

from content_pipeline.agents.base import (
    AgentError,
    ResearchError,
    WriterError,
    FactCheckError,
    PolishError,
)
from content_pipeline.agents.researcher import ResearcherAgent
from content_pipeline.agents.writer import WriterAgent
from content_pipeline.agents.fact_checker import FactCheckerAgent, FactCheckResult
from content_pipeline.agents.polisher import PolisherAgent

__all__ = [
    "AgentError",
    "ResearchError",
    "WriterError",
    "FactCheckError",
    "PolishError",
    "ResearcherAgent",
    "WriterAgent",
    "FactCheckerAgent",
    "FactCheckResult",
    "PolisherAgent",
]
