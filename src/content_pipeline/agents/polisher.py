"""
Polisher Agent for the content pipeline.

Final agent. Edits the fact-checked draft for clarity, engagement, tone and
grammar without changing its factual content.
"""

from content_pipeline.agents.base import BaseAgent, PolishError
from content_pipeline.database.models import AgentNameEnum


POLISH_PROMPT = """You are a style editor. Polish this blog post for clarity, engagement, and professional tone. Fix any grammar issues. Do NOT change factual content:

{draft}"""


class PolisherAgent(BaseAgent):
    """Agent that produces the publishable version of the draft."""

    agent_name = AgentNameEnum.POLISHER
    error_class = PolishError

    async def execute(self, draft: str) -> str:
        """Polish a draft; returns the model output unmodified."""
        return await self.call_llm(POLISH_PROMPT.format(draft=draft))
