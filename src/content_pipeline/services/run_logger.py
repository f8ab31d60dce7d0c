"""
Best-effort execution log for pipeline runs.

Each append runs in its own session and transaction so entries from
concurrent runs are independent inserts. A failing log store never affects
the pipeline: errors are logged and swallowed here.
"""

import logging
from typing import Callable, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from content_pipeline.database.models import AgentLog, AgentNameEnum
from content_pipeline.database.repositories import AgentLogRepository
from content_pipeline.schemas import LogMetadata

logger = logging.getLogger(__name__)


class RunLogger:
    """Appends one AgentLog row per agent invocation."""

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        """
        Initialize the run logger.

        Args:
            session_factory: Callable returning an AsyncSession usable as an
                async context manager (defaults to the application factory)
        """
        if session_factory is None:
            from content_pipeline.database.session import AsyncSessionFactory
            session_factory = AsyncSessionFactory
        self.session_factory = session_factory

    async def append(
        self,
        run_id: UUID,
        agent: Union[AgentNameEnum, str],
        input_text: str,
        output_text: str,
        metadata: Optional[LogMetadata] = None,
    ) -> None:
        """
        Append an agent log entry for a run.

        Args:
            run_id: Run the entry belongs to
            agent: Agent that was invoked
            input_text: Input given to the agent
            output_text: Agent output (empty string on failure)
            metadata: Optional structured metadata for the entry
        """
        try:
            agent_log = AgentLog(
                run_id=run_id,
                agent=AgentNameEnum(agent),
                input=input_text,
                output=output_text,
                log_metadata=metadata.model_dump(mode="json") if metadata is not None else None,
            )
            async with self.session_factory() as session:
                await AgentLogRepository(session).create(agent_log)
                await session.commit()
        except Exception:
            logger.warning(
                "Failed to log %s action for run %s", agent, run_id, exc_info=True
            )
