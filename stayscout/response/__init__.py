"""Conversational response synthesis."""

from .models import ConversationalResponse, PropertyRecommendation, ResponseRequest
from .synthesizer import (
    LLMEnhancedResponder,
    ResponseStrategy,
    RuleBasedResponder,
    create_responder,
    should_enhance,
)

__all__ = [
    "ConversationalResponse",
    "LLMEnhancedResponder",
    "PropertyRecommendation",
    "ResponseRequest",
    "ResponseStrategy",
    "RuleBasedResponder",
    "create_responder",
    "should_enhance",
]
