"""Conversational turn orchestration."""

from .processor import TurnProcessor, TurnResult

__all__ = ["TurnProcessor", "TurnResult"]
