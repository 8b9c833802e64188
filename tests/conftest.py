"""Pytest configuration and shared fixtures."""
import os
from io import BytesIO
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image

from aistudio_client.chat import ChatClient
from aistudio_client.llm import ImageResponse, LLMProvider, LLMResponse


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "gemini": os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
    }


@pytest.fixture(scope="session")
def png_bytes():
    """Return a small valid PNG image."""
    buffer = BytesIO()
    Image.new("RGB", (4, 3), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def provider(png_bytes):
    """Return a fake LLM provider that answers 'resp' and a 4x3 PNG."""
    fake = Mock(spec=LLMProvider)
    fake.model = "test-model"
    fake.chat_completion = AsyncMock(
        return_value=LLMResponse(content="resp", model="test-model")
    )
    fake.generate_image = AsyncMock(
        return_value=ImageResponse(data=png_bytes, mime_type="image/png", model="test-image-model")
    )
    fake.close = AsyncMock()
    return fake


@pytest.fixture
def provider_factory(provider):
    """Return a provider factory that always hands out the fake provider."""
    return Mock(return_value=provider)


@pytest.fixture
def client(provider_factory):
    """Return an uninitialized ChatClient wired to the fake provider."""
    return ChatClient(provider_factory=provider_factory)


@pytest.fixture
def initialized_client(client):
    """Return a ChatClient initialized with key 'k' and no system prompt."""
    assert client.initialize("k", "")
    return client
