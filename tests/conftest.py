"""
Pytest configuration and fixtures for assistr tests.
"""

import json
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add packages to path for testing
packages_dir = Path(__file__).parent.parent / "packages"
sys.path.insert(0, str(packages_dir / "assistr-core"))
sys.path.insert(0, str(packages_dir / "assistr-mcp"))


@pytest.fixture
def now():
    """A fixed mid-day reference time."""
    return datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def sample_task_data():
    """Sample task data for testing."""
    return {
        "title": "Test Task",
        "description": "A test task description",
        "status": "todo",
        "priority": "medium",
        "category": "work",
        "tags": ["test", "sample"],
    }


def completion_body(content: str) -> dict:
    """A chat-completion response body carrying `content`."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def make_ai_client():
    """
    Build an AIClient whose endpoint replies with canned text.

    The returned client records each request payload on `client.requests`.
    """
    import httpx

    from assistr.ai import AIClient
    from assistr.config import AIConfig

    def factory(*replies, status_code: int = 200):
        queue = list(replies)
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            content = queue.pop(0) if len(queue) > 1 else (queue[0] if queue else "")
            return httpx.Response(status_code, json=completion_body(content))

        client = AIClient(
            AIConfig(endpoint="https://ai.test/chat/completions", api_key="test-key"),
            transport=httpx.MockTransport(handler),
        )
        client.requests = requests
        return client

    return factory
