"""Pytest configuration and shared fixtures."""

import httpx
import pytest

from hevy_cli import cli
from hevy_cli.client import HevyClient


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """
    Point the config directory at a temp home and clear Hevy env vars.
    Also keeps a developer's .env out of the tests.
    """
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("HEVY_API_KEY", raising=False)
    monkeypatch.delenv("HEVY_BASE_URL", raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda *args, **kwargs: False)
    return tmp_path


@pytest.fixture
def api_key(monkeypatch):
    """Provide an API key through the environment."""
    key = "11111111-2222-3333-4444-555555555555"
    monkeypatch.setenv("HEVY_API_KEY", key)
    return key


@pytest.fixture
def stub_api(monkeypatch):
    """
    Route CLI requests to an in-process handler.

    Call the fixture with a handler taking an ``httpx.Request`` and returning
    an ``httpx.Response``. Requests seen by the handler are collected in the
    returned list.
    """
    requests: list[httpx.Request] = []

    def install(handler):
        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        def create_client(api_key, base_url=None):
            return HevyClient(
                api_key=api_key,
                base_url=base_url,
                transport=httpx.MockTransport(recording_handler),
            )

        monkeypatch.setattr(cli, "create_client", create_client)
        return requests

    return install


@pytest.fixture
def run_cli():
    """Run the CLI with ``argv`` and return its exit code."""

    def run(*argv: str) -> int:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(list(argv))
        return exc_info.value.code

    return run


@pytest.fixture
def sample_workouts():
    """Workout records in the shape the API returns them."""
    return [
        {
            "id": "w1",
            "title": "Leg Day",
            "start_time": "2024-01-01T00:00:00Z",
            "duration": 45,
        },
        {
            "id": "w2",
            "name": "Push",
            "startTime": "2024-01-03T18:30:00Z",
        },
    ]
