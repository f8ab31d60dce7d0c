"""Database package for the content pipeline."""

from .models import (
    Base,
    AgentLog,
    AgentNameEnum,
)

__all__ = [
    "Base",
    "AgentLog",
    "AgentNameEnum",
]
