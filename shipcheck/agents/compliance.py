"""Compliance agent: PII handling and operational visibility."""

from shipcheck.agents.base import CategoryAgent
from shipcheck.models import Category


class ComplianceAgent(CategoryAgent):
    category = Category.COMPLIANCE
