"""
Repository pattern for database operations.

Provides clean abstraction over SQLAlchemy for the execution log.
"""

from typing import Any, Dict, List
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from content_pipeline.database.models import AgentLog


class AgentLogRepository:
    """Repository for AgentLog operations (append and read only)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, agent_log: AgentLog) -> AgentLog:
        """Append a new agent log entry."""
        self.session.add(agent_log)
        await self.session.flush()
        await self.session.refresh(agent_log)
        return agent_log

    async def get_by_run_id(self, run_id: UUID) -> List[AgentLog]:
        """Get all log entries for a run, oldest first."""
        result = await self.session.execute(
            select(AgentLog)
            .where(AgentLog.run_id == run_id)
            .order_by(AgentLog.created_at.asc())
        )
        return list(result.scalars().all())

    async def list_runs(self, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Summarise the most recent runs.

        Args:
            limit: Maximum number of runs to return

        Returns:
            List of dicts with run_id, entry_count, started_at and last_entry_at,
            most recently active run first
        """
        last_entry_at = func.max(AgentLog.created_at).label("last_entry_at")
        result = await self.session.execute(
            select(
                AgentLog.run_id,
                func.count(AgentLog.id).label("entry_count"),
                func.min(AgentLog.created_at).label("started_at"),
                last_entry_at,
            )
            .group_by(AgentLog.run_id)
            .order_by(last_entry_at.desc())
            .limit(limit)
        )
        return [
            {
                "run_id": row.run_id,
                "entry_count": row.entry_count,
                "started_at": row.started_at,
                "last_entry_at": row.last_entry_at,
            }
            for row in result.all()
        ]
