"""
Writer Agent for the content pipeline.

Second agent in the pipeline. Produces the blog post draft from the
requirements document and the research findings. Also used for revisions,
in which case fact-check feedback is appended to the research text.
"""

from typing import List

from content_pipeline.agents.base import BaseAgent, WriterError
from content_pipeline.database.models import AgentNameEnum


WRITER_PROMPT = """You are a blog writer. Based on this PRD: {document}

And these research findings: {research}

Write a comprehensive blog post (800-1000 words) that covers the key points. Include facts from the research with inline references. Make it engaging and well-structured with clear sections."""

REVISION_FEEDBACK_MARKER = "\n\nREVISION FEEDBACK: "


def revision_feedback(issues: List[str]) -> str:
    """Turn fact-check issues into revision instructions for the writer."""
    return (
        f"The fact-checker found these issues: {', '.join(issues)}. "
        "Please revise the draft to address them."
    )


def revision_research(research: str, feedback: str) -> str:
    """Splice revision feedback onto the research text."""
    return research + REVISION_FEEDBACK_MARKER + feedback


class WriterAgent(BaseAgent):
    """
    Agent that writes the blog post.

    Output is the raw model text, returned unmodified.
    """

    agent_name = AgentNameEnum.WRITER
    error_class = WriterError

    async def execute(self, document: str, research: str) -> str:
        """
        Write a blog post draft.

        Args:
            document: Requirements document
            research: Research findings, optionally with revision feedback appended

        Returns:
            Generated draft
        """
        return await self.call_llm(WRITER_PROMPT.format(document=document, research=research))
