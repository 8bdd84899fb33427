"""Integration tests for capture endpoints."""
from __future__ import annotations

import io

import pytest
from PIL import Image

from gifcapture.infrastructure.config import DiagnosticsSettings


def _body(**overrides) -> dict:
    body = {
        "video_path": "clip.mp4",
        "start_time": 1.0,
        "end_time": 2.0,
        "frame_rate": 5,
        "target_width": 320,
        "target_height": 180,
    }
    body.update(overrides)
    return body


class TestCreateCapture:
    """Tests for POST /api/captures."""

    @pytest.mark.asyncio
    async def test_capture_and_download(self, async_client, opened_sources):
        response = await async_client.post("/api/captures", json=_body())

        assert response.status_code == 200
        data = response.json()
        meta = data["metadata"]
        assert meta["frame_count"] == 5
        assert (meta["width"], meta["height"]) == (320, 180)
        assert meta["extraction_method"] == "seek-verified"
        assert meta["encoder"] == "pillow-mediancut"
        assert data["filename"].startswith("gif-")
        assert data["download_url"] == f"/api/download/{data['filename']}"

        path, source = opened_sources[0]
        assert path.name == "clip.mp4"
        assert source.closed

        download = await async_client.get(data["download_url"])
        assert download.status_code == 200
        assert download.headers["content-type"] == "image/gif"
        image = Image.open(io.BytesIO(download.content))
        assert image.n_frames == 5
        assert image.size == (320, 180)

    @pytest.mark.asyncio
    async def test_capture_with_overlay_and_filename(self, async_client):
        response = await async_client.post("/api/captures", json=_body(
            filename="my-clip",
            text_overlays=[{"text": "Hello", "y_percent": 50, "font_size": 20}],
        ))

        assert response.status_code == 200
        assert response.json()["filename"] == "my-clip.gif"

    @pytest.mark.asyncio
    async def test_invalid_time_range(self, async_client, opened_sources):
        response = await async_client.post("/api/captures", json=_body(start_time=3.0, end_time=1.0))

        assert response.status_code == 400
        assert "end_time" in response.json()["detail"]
        assert opened_sources == []

    @pytest.mark.asyncio
    async def test_invalid_quality(self, async_client):
        response = await async_client.post("/api/captures", json=_body(quality="ultra"))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_video(self, async_client):
        response = await async_client.post("/api/captures", json=_body(video_path="missing.mp4"))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unsupported_extension(self, async_client):
        response = await async_client.post("/api/captures", json=_body(video_path="notes.txt"))

        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_path_outside_video_dir(self, async_client):
        response = await async_client.post("/api/captures", json=_body(video_path="../elsewhere.mp4"))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_filename_outside_storage(self, async_client):
        response = await async_client.post("/api/captures", json=_body(filename="../escape"))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_stuck_video(self, async_client, source_options, opened_sources):
        source_options["stuck"] = True
        response = await async_client.post("/api/captures", json=_body(end_time=3.0))

        assert response.status_code == 422
        data = response.json()
        assert data["duplicate_count"] == 5
        assert data["frame_index"] == 5
        assert "Video buffering stuck" in data["detail"]
        assert opened_sources[0][1].closed

    @pytest.mark.asyncio
    async def test_unusable_source(self, async_client, source_options):
        source_options["ready_state"] = 0
        response = await async_client.post("/api/captures", json=_body())

        assert response.status_code == 503


class TestProgressEndpoint:
    """Tests for GET /api/captures/progress."""

    @pytest.mark.asyncio
    async def test_progress_before_any_capture(self, async_client):
        response = await async_client.get("/api/captures/progress")

        assert response.status_code == 200
        assert response.json() == {"stage": None, "progress": 0}

    @pytest.mark.asyncio
    async def test_progress_after_capture(self, async_client):
        await async_client.post("/api/captures", json=_body())
        response = await async_client.get("/api/captures/progress")

        data = response.json()
        assert data["stage"] == "COMPLETED"
        assert data["progress"] == 100.0
        assert data["encoder"] == "pillow-mediancut"
        assert data["total_stages"] == 4

    @pytest.mark.asyncio
    async def test_progress_after_failure(self, async_client, source_options):
        source_options["stuck"] = True
        await async_client.post("/api/captures", json=_body(end_time=3.0))
        response = await async_client.get("/api/captures/progress")

        data = response.json()
        assert data["stage"] == "ERROR"
        assert data["progress"] < 25.0


class TestDiagnosticsEndpoint:
    @pytest.mark.asyncio
    async def test_disabled(self, async_client):
        response = await async_client.get("/api/captures/diagnostics")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_enabled(self, async_client, test_container):
        test_container.settings.diagnostics = DiagnosticsSettings(enabled=True)
        await async_client.post("/api/captures", json=_body())
        response = await async_client.get("/api/captures/diagnostics")

        assert response.status_code == 200
        summary = response.json()
        assert summary["frames"] == 5
        assert summary["duplicates"] == 0


class TestDownloadEndpoint:
    @pytest.mark.asyncio
    async def test_missing_file(self, async_client):
        response = await async_client.get("/api/download/nothing.gif")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_gif_rejected(self, async_client, test_container):
        (test_container.file_storage().base_dir / "notes.txt").write_text("x")
        response = await async_client.get("/api/download/notes.txt")

        assert response.status_code == 404
