"""
Chat-completion client and prompts.
"""

from assistr.ai.client import AIClient, AIServiceError

__all__ = [
    "AIClient",
    "AIServiceError",
]
