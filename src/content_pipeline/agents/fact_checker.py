"""
Fact-Checker Agent for the content pipeline.

Third agent in the pipeline. Compares the draft against the research and
either passes it or lists the claims the research does not support.

A failed verdict is a normal result (the orchestrator revises the draft);
only an execution failure raises FactCheckError.
"""

import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from content_pipeline.agents.base import BaseAgent, FactCheckError
from content_pipeline.config import settings
from content_pipeline.database.models import AgentNameEnum
from content_pipeline.services.llm_client import LLMClient


FACT_CHECK_PROMPT = """You are a fact-checker. Compare this draft: {draft}

Against these sources: {research}

List any claims in the draft that are NOT supported by the sources. If everything checks out, respond with 'PASS'. Otherwise, list the unsupported claims as bullet points."""

PASS_TOKEN = "PASS"
BULLET_PATTERN = re.compile(r"^[-*•]\s*")


@dataclass(frozen=True)
class FactCheckResult:
    """Verdict of a single fact-check attempt."""
    passed: bool
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_fact_check_response(response: str) -> FactCheckResult:
    """
    Parse the fact-checker's reply.

    Any case-insensitive occurrence of PASS means the draft passed. Otherwise
    each non-blank line without PASS is an issue, with a leading bullet
    (-, * or •) and surrounding whitespace stripped.
    """
    if PASS_TOKEN in response.upper():
        return FactCheckResult(passed=True, issues=[])

    issues = []
    for line in response.split("\n"):
        if not line.strip() or PASS_TOKEN in line.upper():
            continue
        issue = BULLET_PATTERN.sub("", line).strip()
        if issue:
            issues.append(issue)

    return FactCheckResult(passed=False, issues=issues)


class FactCheckerAgent(BaseAgent):
    """
    Agent that validates a draft against the research findings.

    Uses FACT_CHECK_MODEL regardless of the model used for writing.
    """

    agent_name = AgentNameEnum.FACT_CHECKER
    error_class = FactCheckError

    def __init__(self, llm_client: Optional[LLMClient] = None, model_name: Optional[str] = None):
        """Initialize FactCheckerAgent."""
        super().__init__(llm_client=llm_client, model_name=model_name or settings.FACT_CHECK_MODEL)

    async def execute(self, draft: str, research: str) -> FactCheckResult:
        """
        Fact-check a draft.

        Args:
            draft: Blog post draft
            research: Research findings to check against

        Returns:
            FactCheckResult with passed flag and unsupported claims
        """
        response = await self.call_llm(FACT_CHECK_PROMPT.format(draft=draft, research=research))
        return parse_fact_check_response(response)
