"""Sync bounded context: HTTP surface over the sync orchestrator and queue."""
