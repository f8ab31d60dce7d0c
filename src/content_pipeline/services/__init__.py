"""External service clients, execution log and pipeline orchestration."""
