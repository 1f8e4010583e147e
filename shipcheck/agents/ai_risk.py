"""AI-risk agent: prompt injection, unbounded model calls, context leakage."""

from shipcheck.agents.base import CategoryAgent
from shipcheck.models import Category


class AiRiskAgent(CategoryAgent):
    category = Category.AI_RISK
