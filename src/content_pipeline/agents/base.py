"""
Base Agent class for the content pipeline.

Provides common functionality for calling the LLM and executing agent logic
with fail-fast error handling. Agents are stateless with respect to a run:
they receive inputs and return outputs, and never touch pipeline state.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from content_pipeline.config import settings
from content_pipeline.database.models import AgentNameEnum
from content_pipeline.services.llm_client import LLMClient

logger = logging.getLogger(__name__)


class AgentError(Exception):
    """
    Base exception for agent errors.

    Carries the agent that failed and the innermost human-readable message;
    the original exception is chained as __cause__.
    """

    label = "Agent"
    agent: Optional[AgentNameEnum] = None

    def __init__(self, message: str, agent: Optional[AgentNameEnum] = None):
        self.message = message
        if agent is not None:
            self.agent = agent
        super().__init__(f"{self.label} agent failed: {message}")


class ResearchError(AgentError):
    """Raised when the researcher fails."""
    label = "Research"
    agent = AgentNameEnum.RESEARCHER


class WriterError(AgentError):
    """Raised when the writer fails."""
    label = "Writer"
    agent = AgentNameEnum.WRITER


class FactCheckError(AgentError):
    """Raised when the fact-checker fails to execute (not a failed verdict)."""
    label = "Fact-checker"
    agent = AgentNameEnum.FACT_CHECKER


class PolishError(AgentError):
    """Raised when the polisher fails."""
    label = "Polisher"
    agent = AgentNameEnum.POLISHER


class BaseAgent(ABC):
    """
    Base class for all agents in the pipeline.

    Each agent:
    1. Builds its prompt from a fixed template
    2. Calls the LLM with its model (single shot, no retries)
    3. Parses the response into its output
    4. Wraps any failure in its own error class (fail fast)
    """

    agent_name: AgentNameEnum
    error_class = AgentError

    def __init__(self, llm_client: Optional[LLMClient] = None, model_name: Optional[str] = None):
        """
        Initialize the agent.

        Args:
            llm_client: Client used for text generation (created from settings if omitted)
            model_name: Model identifier (defaults to DEFAULT_MODEL)
        """
        self.llm_client = llm_client or LLMClient()
        self.model_name = model_name or settings.DEFAULT_MODEL

    async def call_llm(self, prompt: str) -> str:
        """Generate text for a prompt with this agent's model."""
        return await self.llm_client.generate(prompt, model=self.model_name)

    @abstractmethod
    async def execute(self, *args: Any) -> Any:
        """
        Execute agent logic.

        Raises:
            Exception: Any failure; run() wraps it in the agent's error class
        """
        pass

    async def run(self, *args: Any) -> Any:
        """
        Main entry point to run the agent.

        Implements fail-fast behavior: any error propagates immediately,
        wrapped in this agent's error class.

        Raises:
            AgentError: Subclass matching this agent if execution fails
        """
        try:
            return await self.execute(*args)
        except self.error_class:
            raise
        except Exception as e:
            logger.error("Error in %s: %s", self.agent_name.value, e)
            raise self.error_class(str(e)) from e
