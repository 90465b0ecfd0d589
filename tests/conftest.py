import os

# Set TESTING environment variable before any imports to prevent config issues
os.environ["TESTING"] = "true"

import pytest

from app import create_app
from helpers.completion import CompletionClient
from services.generation_service import GenerationService
from services.usage_store import InMemoryUsageStore

TEST_CONFIG = {
    "TESTING": True,
    "GEMINI_API_KEY": None,
    "GEMINI_MODEL": "gemini-test",
    "GENERATION_STRATEGY": "per_platform",
    "BRAND_LINE": "",
    "DAILY_USAGE_LIMIT": 0,
    "USAGE_STORE": "memory",
    "PREVIEW_USER": None,
    "PREVIEW_PASSWORD": None,
    "FRONTEND_ORIGIN": "",
}


class FakeCompletionClient(CompletionClient):
    """
    Completion client spy.

    ``reply`` is either a string returned for every call or a callable that
    receives the PromptPayload. ``error`` is raised instead when set.
    """

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, prompt, max_tokens=None):
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply

    @property
    def call_count(self):
        return len(self.calls)


@pytest.fixture()
def app():
    """
    Function-scoped test Flask application.
    Each test gets a fresh generation service and usage store.
    """
    flask_app = create_app(TEST_CONFIG)
    yield flask_app


@pytest.fixture()
def client(app):
    """
    Function-scoped test client for making HTTP requests.
    """
    return app.test_client()


@pytest.fixture()
def app_context(app):
    with app.app_context():
        yield


@pytest.fixture()
def fake_client():
    return FakeCompletionClient("A ready-to-post text.")


@pytest.fixture()
def install_service(app):
    """
    Replace the app's generation service with one backed by the given client.
    Extra keyword arguments are passed to GenerationService.
    """

    def _install(completion_client, **kwargs):
        kwargs.setdefault("usage_store", InMemoryUsageStore())
        service = GenerationService(client=completion_client, **kwargs)
        app.extensions["generation_service"] = service
        return service

    return _install


@pytest.fixture
def cli_runner(app):
    """
    Custom CLI runner for testing CLI commands.
    """
    return app.test_cli_runner()
