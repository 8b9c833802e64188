"""Google Gemini LLM provider implementation.

Uses the official Google GenAI SDK for async chat completions and image
generation.
Reference: https://github.com/googleapis/python-genai

Note: Gemini can return candidates without any text (safety filtering, or an
image model answering with pictures only). Such responses are returned with
empty content instead of raising, the caller decides what an empty answer
means.
"""

from typing import Any

from google import genai
from google.genai import types

from ..base import LLMProvider
from ..models import ChatMessage, ImageResponse, LLMResponse

DEFAULT_CHAT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"

# Relaxed so that ordinary chat content is not blocked
DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - Message format conversion (assistant -> model, system -> instruction)
    - Where the image payload lives in a generate_content response
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_CHAT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI Studio API key
            model: Default chat model
            image_model: Default image-capable model
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._image_model = image_model
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @property
    def image_model(self) -> str:
        """Get the default image model name."""
        return self._image_model

    def _convert_messages(self, messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
        """Convert ChatMessage list to Gemini format.

        Args:
            messages: List of chat messages

        Returns:
            Tuple of (system_instruction, contents)
        """
        system_instruction = None
        contents = []

        for msg in messages:
            if msg.role == "system":
                system_instruction = msg.content
            elif msg.role == "user":
                contents.append(types.Content(
                    role="user",
                    parts=[types.Part(text=msg.content)]
                ))
            elif msg.role == "assistant":
                contents.append(types.Content(
                    role="model",
                    parts=[types.Part(text=msg.content)]
                ))

        return system_instruction, contents

    def _extract_content(self, response) -> str:
        """Extract text content from Gemini response, handling empty responses.

        Args:
            response: Gemini GenerateContentResponse

        Returns:
            Text content or empty string
        """
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)

        # response.text may raise or return None
        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    def _extract_image(self, response) -> tuple[bytes | str | None, str | None]:
        """Find the image payload in the first candidate.

        Image models may interleave a caption part before the picture, so the
        first part that carries inline data wins.

        Returns:
            Tuple of (payload, mime_type); (None, None) when there is no image
        """
        if not response.candidates:
            return None, None

        content = response.candidates[0].content
        if content is None or not content.parts:
            return None, None

        for part in content.parts:
            blob = getattr(part, "inline_data", None)
            if blob is not None and blob.data:
                return blob.data, blob.mime_type

        return None, None

    def _usage(self, response) -> dict[str, int] | None:
        if not response.usage_metadata:
            return None
        return {
            "prompt_tokens": response.usage_metadata.prompt_token_count or 0,
            "completion_tokens": response.usage_metadata.candidates_token_count or 0,
            "total_tokens": response.usage_metadata.total_token_count or 0
        }

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion using Google Gemini.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional Gemini-specific parameters

        Returns:
            LLMResponse with generated content (possibly empty)
        """
        model_to_use = model or self._model
        system_instruction, contents = self._convert_messages(messages)

        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            **kwargs
        )
        if max_tokens is not None:
            config.max_output_tokens = max_tokens

        response = await self._client.aio.models.generate_content(
            model=model_to_use,
            contents=contents,
            config=config
        )

        return LLMResponse(
            content=self._extract_content(response),
            model=model_to_use,
            usage=self._usage(response)
        )

    async def generate_image(
        self,
        prompt: str,
        model: str | None = None,
        **kwargs: Any
    ) -> ImageResponse:
        """Generate an image using a Gemini image-capable model.

        Args:
            prompt: Image description
            model: Model to use (overrides default image model)
            **kwargs: Additional Gemini-specific parameters

        Returns:
            ImageResponse with the first inline image payload, if any
        """
        model_to_use = model or self._image_model

        config = types.GenerateContentConfig(
            response_modalities=["TEXT", "IMAGE"],
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            **kwargs
        )

        response = await self._client.aio.models.generate_content(
            model=model_to_use,
            contents=prompt,
            config=config
        )

        data, mime_type = self._extract_image(response)
        return ImageResponse(
            data=data,
            mime_type=mime_type,
            text=self._extract_content(response),
            model=model_to_use,
        )

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
