"""Speech bridge.

Hidden design decisions:
- "Speak this text" requests travel over a single-consumer channel
- Latest wins: an event the consumer has not picked up yet is replaced by a
  newer one, and a newer event interrupts speech already in progress
- Synthesis itself belongs to an external SpeechEngine
"""

import asyncio
import contextlib
import locale
import logging
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_CLOSED = object()


class SpeechBridge:
    """One-shot "speak" events for at most one subscriber."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._subscribed = False
        self._closed = False

    def speak(self, text: str) -> bool:
        """Publish ``text`` for the speech collaborator.

        Blank text is ignored, as is anything sent after close().

        Returns:
            True if an event was published
        """
        if self._closed or not text or not text.strip():
            return False
        # Only text events can be pending here; the close marker comes last
        while not self._queue.empty():
            self._queue.get_nowait()
            logger.debug("Speech event superseded before delivery")
        self._queue.put_nowait(text)
        return True

    @property
    def pending(self) -> bool:
        """Whether an event is waiting for the subscriber."""
        return not self._queue.empty()

    async def get(self) -> str | None:
        """Wait for the next event; None once the bridge is closed."""
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        return item

    async def events(self) -> AsyncIterator[str]:
        """Iterate over events until the bridge is closed.

        Raises:
            RuntimeError: If another consumer is already subscribed
        """
        if self._subscribed:
            raise RuntimeError("SpeechBridge supports a single subscriber")
        self._subscribed = True
        try:
            while True:
                text = await self.get()
                if text is None:
                    return
                yield text
        finally:
            self._subscribed = False

    def close(self) -> None:
        """Stop delivering events and release the subscriber."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)


class SpeechEngine(ABC):
    """Platform text-to-speech collaborator."""

    @abstractmethod
    async def speak(self, text: str) -> Any:
        """Speak ``text``. May be cancelled when a newer request arrives.

        Cancellation only reaches the awaiting coroutine. Work already handed
        to a thread keeps running unless the engine checks for it.
        """


def default_language() -> str:
    """Two-letter language code of the current locale, 'en' if unknown."""
    code = locale.getlocale()[0]
    if not code or code in ("C", "POSIX"):
        return "en"
    return code.split("_")[0].lower()


class GTTSSpeechEngine(SpeechEngine):
    """Synthesizes speech to MP3 files with gTTS.

    Playback is left to the user; each request produces one file.
    """

    def __init__(self, output_dir: str | Path | None = None, lang: str | None = None) -> None:
        self._output_dir = Path(output_dir) if output_dir else Path(tempfile.gettempdir()) / "aistudio_speech"
        self._lang = lang or default_language()

    @property
    def lang(self) -> str:
        return self._lang

    def _synthesize(self, text: str, path: Path, cancelled: threading.Event) -> Path | None:
        from gtts import gTTS

        tts = gTTS(text, lang=self._lang)
        # A download already in progress cannot be stopped
        if cancelled.is_set():
            logger.debug("Speech cancelled before synthesis, skipping %s", path.name)
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
        tts.save(str(path))
        return path

    async def speak(self, text: str, path: str | Path | None = None) -> Path | None:
        """Write ``text`` as speech to an MP3 file and return its path.

        If the request is cancelled before the worker thread starts the
        download, no file is written.
        """
        target = Path(path) if path else self._output_dir / f"speech-{uuid.uuid4().hex[:8]}.mp3"
        cancelled = threading.Event()
        try:
            return await asyncio.to_thread(self._synthesize, text, target, cancelled)
        except asyncio.CancelledError:
            cancelled.set()
            raise


async def run_speech_consumer(
    bridge: SpeechBridge,
    engine: SpeechEngine,
    on_spoken: Callable[[str, Any], None] | None = None,
) -> None:
    """Forward bridge events to ``engine`` until the bridge closes.

    A new event cancels speech that is still in progress. Engine failures
    are logged and do not stop the consumer.

    Args:
        bridge: Event source
        engine: Speech collaborator
        on_spoken: Called with (text, engine result) after each success
    """
    current: asyncio.Task | None = None

    async def _speak(text: str) -> None:
        try:
            result = await engine.speak(text)
        except asyncio.CancelledError:
            logger.debug("Speech interrupted by a newer request")
            raise
        except Exception as e:
            logger.error("Speech synthesis failed: %s", e)
            return
        if on_spoken is not None:
            on_spoken(text, result)

    try:
        async for text in bridge.events():
            if current is not None and not current.done():
                current.cancel()
            current = asyncio.create_task(_speak(text))
        if current is not None:
            await current
    finally:
        if current is not None and not current.done():
            current.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await current
