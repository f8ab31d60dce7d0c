"""
SQLAlchemy models for the content pipeline database.

Only the execution log lives here: one append-only row per agent invocation.
"""

from sqlalchemy import Column, Text, DateTime, Enum, Index, func
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.dialects.postgresql import UUID, JSONB
import enum
import uuid


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class AgentNameEnum(str, enum.Enum):
    """Agents that write to the execution log."""
    RESEARCHER = "researcher"
    WRITER = "writer"
    FACT_CHECKER = "fact-checker"
    POLISHER = "polisher"


class AgentLog(Base):
    """
    Immutable record of a single agent invocation within a pipeline run.

    Rows are inserted once and never updated or deleted by the pipeline.
    The timeline viewer reads them back per run ordered by created_at.
    """
    __tablename__ = "agent_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    run_id = Column(UUID(as_uuid=True), nullable=False)
    agent = Column(
        Enum(
            AgentNameEnum,
            name="agent_name",
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )
    input = Column(Text, nullable=False, default="")
    output = Column(Text, nullable=False, default="")

    # "metadata" is reserved on declarative classes
    log_metadata = Column("metadata", JSONB, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('ix_agent_logs_run_id', 'run_id'),
        Index('ix_agent_logs_created_at', 'created_at'),
    )
