"""Execution context adapters: one per document context."""

from .adapter import ExecutionContextAdapter

__all__ = ["ExecutionContextAdapter"]
