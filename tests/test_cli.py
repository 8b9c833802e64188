"""Tests for the command-line interface."""
from pathlib import Path

import pytest
from typer.testing import CliRunner

from aistudio_client.chat import ChatClient
from aistudio_client.cli import app as cli_app
from aistudio_client.cli import providers as cli_providers
from aistudio_client.llm import ImageResponse

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_environment(monkeypatch):
    """Keep tests independent of the caller's environment and logging."""
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "AISTUDIO_SYSTEM_PROMPT", "GEMINI_MODEL", "GEMINI_IMAGE_MODEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli_app, "configure_logging", lambda level=None: None)


@pytest.fixture
def fake_client(monkeypatch, provider_factory):
    """Make the CLI build clients around the fake provider."""
    monkeypatch.setattr(cli_providers, "get_client", lambda: ChatClient(provider_factory=provider_factory))


class FakeSpeechEngine:
    """Stands in for GTTSSpeechEngine and writes a placeholder file."""

    def __init__(self, output_dir=None, lang=None):
        self.output_dir = Path(output_dir) if output_dir else Path(".")
        self.lang = lang

    async def speak(self, text):
        path = self.output_dir / "speech.mp3"
        path.write_bytes(text.encode("utf-8"))
        return path


class TestProviders:
    """Tests for environment helpers."""

    def test_api_key_fallback(self, monkeypatch):
        """Test GEMINI_API_KEY first, then GOOGLE_API_KEY."""
        assert cli_providers.get_api_key() is None

        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        assert cli_providers.get_api_key() == "google-key"

        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
        assert cli_providers.get_api_key() == "gemini-key"

    def test_client_models_from_environment(self, monkeypatch):
        """Test that model names come from the environment."""
        monkeypatch.setenv("GEMINI_MODEL", "chat-x")
        monkeypatch.setenv("GEMINI_IMAGE_MODEL", "image-x")

        client = cli_providers.get_client()
        client.initialize("k")

        assert client.session.model == "chat-x"
        assert client.session.image_model == "image-x"

    def test_require_client_uses_system_prompt_from_environment(self, monkeypatch, fake_client):
        """Test that AISTUDIO_SYSTEM_PROMPT seeds the conversation."""
        monkeypatch.setenv("AISTUDIO_SYSTEM_PROMPT", "Be brief")

        client = cli_providers.require_client(api_key="k")

        assert client.state.messages[0].content == "Be brief"


class TestImageCommand:
    """Tests for the image command."""

    def test_missing_api_key(self, tmp_path):
        """Test that the command fails without a key."""
        result = runner.invoke(cli_app.app, ["image", "a red car", "-o", str(tmp_path / "out.png")])

        assert result.exit_code == 1
        assert "API key cannot be empty" in result.output
        assert not (tmp_path / "out.png").exists()

    def test_image_saved(self, tmp_path, fake_client, png_bytes):
        """Test that the generated image is written to --output."""
        target = tmp_path / "car.png"
        result = runner.invoke(cli_app.app, ["image", "a red car", "-o", str(target), "-k", "k"])

        assert result.exit_code == 0, result.output
        assert target.read_bytes() == png_bytes
        assert "4x3" in result.output

    def test_image_failure(self, tmp_path, fake_client, provider):
        """Test that a response without an image exits with an error."""
        provider.generate_image.return_value = ImageResponse(data=None, model="test-image-model")

        result = runner.invoke(cli_app.app, ["image", "a red car", "-o", str(tmp_path / "x.png"), "-k", "k"])

        assert result.exit_code == 1
        assert "Failed to generate image" in result.output


class TestSpeakCommand:
    """Tests for the speak command."""

    def test_blank_text(self, monkeypatch):
        """Test that blank text is refused."""
        monkeypatch.setattr(cli_app, "GTTSSpeechEngine", FakeSpeechEngine)

        result = runner.invoke(cli_app.app, ["speak", "   "])

        assert result.exit_code == 1
        assert "Nothing to speak" in result.output

    def test_speech_saved(self, monkeypatch, tmp_path):
        """Test that synthesized speech is written to --output-dir."""
        monkeypatch.setattr(cli_app, "GTTSSpeechEngine", FakeSpeechEngine)

        result = runner.invoke(cli_app.app, ["speak", "hello there", "-o", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "speech.mp3").read_text() == "hello there"
        assert "Speech saved" in result.output
