"""
Researcher Agent for the content pipeline.

First agent in the pipeline:
- Extracts 2-3 key topics from the requirements document
- Searches the web for each topic, one at a time, in topic order
- Formats the snippets into a single research document with sources
"""

from typing import List, Optional, Tuple

from content_pipeline.agents.base import BaseAgent, ResearchError
from content_pipeline.config import settings
from content_pipeline.database.models import AgentNameEnum
from content_pipeline.services.llm_client import LLMClient
from content_pipeline.services.web_search import WebSearchClient


TOPIC_EXTRACTION_PROMPT = """You are a research assistant. Analyze this PRD and extract 2-3 key topics or requirements that need research.
Return ONLY the topics as a comma-separated list, nothing else.

PRD: {document}"""


def parse_topics(response: str, max_topics: int = 3) -> List[str]:
    """
    Parse a comma-separated topic list.

    Splits on commas, trims whitespace, drops empty entries and keeps at most
    max_topics in their original order.
    """
    topics = [topic.strip() for topic in response.split(",")]
    return [topic for topic in topics if topic][:max_topics]


def format_research(results: List[Tuple[str, List[str]]]) -> str:
    """
    Format (topic, snippets) pairs into the research document.

    Topic and snippet order is preserved exactly; fact numbering restarts
    at 1 for each topic.
    """
    formatted = "Research findings:\n\n"

    for topic, snippets in results:
        formatted += f"Topic: {topic}\n"
        for index, snippet in enumerate(snippets, start=1):
            formatted += (
                f"\n[Fact {index}]\n{snippet}\n"
                f"Source: Web search result for \"{topic}\"\n"
            )
        formatted += "\n---\n\n"

    return formatted


class ResearcherAgent(BaseAgent):
    """
    Agent that turns a requirements document into sourced research findings.
    """

    agent_name = AgentNameEnum.RESEARCHER
    error_class = ResearchError

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        search_client: Optional[WebSearchClient] = None,
        model_name: Optional[str] = None,
        max_topics: Optional[int] = None,
    ):
        """Initialize ResearcherAgent."""
        super().__init__(llm_client=llm_client, model_name=model_name)
        self.search_client = search_client or WebSearchClient()
        self.max_topics = max_topics or settings.MAX_TOPICS

    async def extract_topics(self, document: str) -> List[str]:
        """Ask the LLM for the document's key topics."""
        response = await self.call_llm(TOPIC_EXTRACTION_PROMPT.format(document=document))
        return parse_topics(response, max_topics=self.max_topics)

    async def execute(self, document: str) -> str:
        """
        Research the key topics of a requirements document.

        Args:
            document: Raw requirements document

        Returns:
            Formatted research findings

        Raises:
            ResearchError: If no topics could be extracted
            Exception: If topic extraction or a search fails (wrapped by run())
        """
        topics = await self.extract_topics(document)
        if not topics:
            raise ResearchError("No topics extracted from document")

        # One search at a time; research text follows topic order
        results = []
        for topic in topics:
            snippets = await self.search_client.search(topic)
            results.append((topic, snippets))

        return format_research(results)
