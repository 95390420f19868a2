"""Tests for the kokoro-onnx engine adapter and model download."""

import dataclasses
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import numpy as np
import pytest

from speech_mcp.engine import kokoro as kokoro_module
from speech_mcp.engine.kokoro import (
    VOICE_METADATA,
    KokoroEngine,
    artifact_paths,
    describe_voice,
    download_file,
    ensure_model_files,
    load_kokoro_engine,
)


class TestVoiceMetadata:
    def test_known_voice(self):
        info = describe_voice("af_bella")
        assert info.grade == "A-"
        assert info.language == "en-us"
        assert info.gender == "female"

    def test_british_voice(self):
        info = describe_voice("bm_george")
        assert info.language == "en-gb"
        assert info.gender == "male"

    def test_unknown_voice_is_ungraded(self):
        info = describe_voice("ef_dora")
        assert info.grade is None
        assert info.language == "es"
        assert info.gender == "female"

    def test_every_entry_named_consistently(self):
        for name, info in VOICE_METADATA.items():
            assert info.name == name


class TestKokoroEngine:
    def test_voices_in_engine_order(self):
        kokoro = MagicMock()
        kokoro.get_voices.return_value = ["bf_emma", "af_heart", "zz_new"]

        voices = KokoroEngine(kokoro).voices()

        assert [v.name for v in voices] == ["bf_emma", "af_heart", "zz_new"]
        assert [v.grade for v in voices] == ["B-", "A", None]

    def test_synthesize_passes_language(self):
        kokoro = MagicMock()
        samples = np.zeros(10, dtype=np.float32)
        kokoro.create.return_value = (samples, 24000)

        result = KokoroEngine(kokoro).synthesize("Cheerio", "bf_emma", 1.2)

        assert result[0] is samples
        assert result[1] == 24000
        kokoro.create.assert_called_once_with("Cheerio", voice="bf_emma", speed=1.2, lang="en-gb")


class TestModelFiles:
    def test_artifact_paths(self, settings):
        paths = artifact_paths(settings)

        assert settings.model_path in paths
        assert settings.voices_path in paths
        assert settings.model_path.with_name(settings.model_file + ".part") in paths
        assert all(p.parent == settings.models_dir for p in paths)

    @pytest.mark.asyncio
    async def test_existing_files_not_downloaded(self, settings):
        settings.models_dir.mkdir(parents=True)
        settings.model_path.write_bytes(b"onnx")
        settings.voices_path.write_bytes(b"voices")

        with patch.object(kokoro_module, "download_file", new=AsyncMock()) as mock_download:
            assert await ensure_model_files(settings) == (settings.model_path, settings.voices_path)

        mock_download.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_files_downloaded_with_token(self, settings):
        settings = dataclasses.replace(
            settings, model_base_url="https://huggingface.co/org/kokoro/resolve/main", access_token="hf_x"
        )
        settings.models_dir.mkdir(parents=True)
        settings.voices_path.write_bytes(b"voices")

        with patch.object(kokoro_module, "download_file", new=AsyncMock()) as mock_download:
            await ensure_model_files(settings)

        mock_download.assert_awaited_once_with(
            "https://huggingface.co/org/kokoro/resolve/main/kokoro-v1.0.int8.onnx",
            settings.model_path,
            token="hf_x",
        )


class TestLoadKokoroEngine:
    @pytest.mark.asyncio
    async def test_loads_model(self, settings, monkeypatch):
        kokoro_class = MagicMock()
        monkeypatch.setitem(sys.modules, "kokoro_onnx", SimpleNamespace(Kokoro=kokoro_class))

        with patch.object(
            kokoro_module,
            "ensure_model_files",
            new=AsyncMock(return_value=(settings.model_path, settings.voices_path)),
        ):
            engine = await load_kokoro_engine(settings)

        kokoro_class.assert_called_once_with(str(settings.model_path), str(settings.voices_path))
        assert isinstance(engine, KokoroEngine)

    @pytest.mark.asyncio
    async def test_download_failure_propagates(self, settings, monkeypatch):
        monkeypatch.setitem(sys.modules, "kokoro_onnx", SimpleNamespace(Kokoro=MagicMock()))

        with patch.object(kokoro_module, "download_file", new=AsyncMock(side_effect=OSError("404"))):
            with pytest.raises(OSError, match="404"):
                await load_kokoro_engine(settings)


class TestDownloadFile:
    @pytest.mark.asyncio
    async def test_session_has_no_total_timeout(self, tmp_path):
        session_class = MagicMock(side_effect=ConnectionError("stop after session setup"))

        with patch("aiohttp.ClientSession", session_class):
            with pytest.raises(ConnectionError):
                await download_file("https://example.invalid/model.onnx", tmp_path / "model.onnx")

        timeout = session_class.call_args.kwargs["timeout"]
        assert timeout.total is None
        assert timeout.sock_connect == 30
        assert timeout.sock_read is not None

    @pytest.mark.asyncio
    async def test_bearer_token_header(self, tmp_path):
        session_class = MagicMock(side_effect=ConnectionError("stop after session setup"))

        with patch("aiohttp.ClientSession", session_class):
            with pytest.raises(ConnectionError):
                await download_file("https://example.invalid/model.onnx", tmp_path / "model.onnx", token="hf_x")

        assert session_class.call_args.kwargs["headers"] == {"Authorization": "Bearer hf_x"}
