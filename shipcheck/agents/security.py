"""Security agent: secrets, code execution, XSS, injection and exposure rules."""

from shipcheck.agents.base import CategoryAgent
from shipcheck.models import Category


class SecurityAgent(CategoryAgent):
    category = Category.SECURITY
