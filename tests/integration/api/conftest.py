"""Integration test fixtures for API testing."""
from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from gifcapture.adapters.inbound.fastapi_app import app
from gifcapture.infrastructure.config import WebSettings
from gifcapture.infrastructure.container import ApplicationContainer


@pytest.fixture
def video_dir(tmp_path):
    """Video directory holding one placeholder clip; decoding is faked."""
    directory = tmp_path / "videos"
    directory.mkdir()
    (directory / "clip.mp4").write_bytes(b"\x00")
    (directory / "notes.txt").write_text("not a video")
    return directory


@pytest.fixture
def test_settings(fast_settings, video_dir):
    """Fast pipeline settings pointed at the temporary video directory."""
    fast_settings.app_env = "test"
    fast_settings.web = WebSettings(video_dir=str(video_dir))
    return fast_settings


@pytest.fixture
def opened_sources():
    return []


@pytest.fixture
def source_options():
    """Keyword arguments for the next fake source a request opens."""
    return {"width": 1280, "height": 720, "duration": 30.0}


@pytest.fixture
def test_container(test_settings, make_source, opened_sources, source_options):
    """Container whose video sources are in-memory fakes."""
    def factory(path):
        source = make_source(**source_options)
        opened_sources.append((path, source))
        return source

    return ApplicationContainer(test_settings, video_source_factory=factory)


@pytest_asyncio.fixture
async def async_client(test_container):
    """Create an async test client for the FastAPI app."""
    app.state.container = test_container

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
