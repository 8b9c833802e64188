"""Unit tests for the speech bridge and speech consumers."""
import asyncio
import threading

import pytest

from aistudio_client.chat import speech as speech_module
from aistudio_client.chat.speech import (
    GTTSSpeechEngine,
    SpeechBridge,
    SpeechEngine,
    default_language,
    run_speech_consumer,
)


class RecordingEngine(SpeechEngine):
    """Speech engine that records calls; 'slow' blocks until cancelled."""

    def __init__(self, fail_on: str | None = None):
        self.started: list[str] = []
        self.spoken: list[str] = []
        self.cancelled: list[str] = []
        self.fail_on = fail_on

    async def speak(self, text: str):
        self.started.append(text)
        if text == self.fail_on:
            raise RuntimeError("audio device unavailable")
        if text == "slow":
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled.append(text)
                raise
        self.spoken.append(text)
        return f"spoken:{text}"


async def _wait_for(predicate, attempts: int = 50) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


class TestSpeechBridge:
    """Tests for SpeechBridge."""

    @pytest.mark.asyncio
    async def test_blank_text_is_ignored(self):
        """Test that empty and whitespace text publish nothing."""
        bridge = SpeechBridge()
        assert bridge.speak("") is False
        assert bridge.speak("   \n") is False
        assert bridge.pending is False

    @pytest.mark.asyncio
    async def test_text_is_delivered(self):
        """Test that one speak call yields one event."""
        bridge = SpeechBridge()
        assert bridge.speak("hello") is True
        assert bridge.pending is True

        assert await bridge.get() == "hello"
        assert bridge.pending is False

    @pytest.mark.asyncio
    async def test_latest_request_wins(self):
        """Test that an undelivered event is replaced by a newer one."""
        bridge = SpeechBridge()
        bridge.speak("first")
        bridge.speak("second")
        bridge.speak("third")

        assert await bridge.get() == "third"
        assert bridge.pending is False

    @pytest.mark.asyncio
    async def test_close_ends_iteration_after_pending_event(self):
        """Test that close() lets the pending event through, then stops."""
        bridge = SpeechBridge()
        bridge.speak("last words")
        bridge.close()

        received = [text async for text in bridge.events()]

        assert received == ["last words"]

    @pytest.mark.asyncio
    async def test_speak_after_close_is_rejected(self):
        """Test that a closed bridge accepts no more events."""
        bridge = SpeechBridge()
        bridge.close()
        bridge.close()

        assert bridge.speak("hello") is False
        assert await bridge.get() is None

    @pytest.mark.asyncio
    async def test_single_subscriber(self):
        """Test that a second concurrent subscriber is refused."""
        bridge = SpeechBridge()
        first = bridge.events()
        pending = asyncio.create_task(first.__anext__())
        await asyncio.sleep(0)

        second = bridge.events()
        with pytest.raises(RuntimeError, match="single subscriber"):
            await second.__anext__()

        bridge.close()
        with pytest.raises(StopAsyncIteration):
            await pending

    @pytest.mark.asyncio
    async def test_client_speak_uses_bridge(self, client):
        """Test that ChatClient.speak publishes on its bridge."""
        assert client.speak("read this") is True
        assert await client.speech.get() == "read this"
        assert client.speak("  ") is False


class TestSpeechConsumer:
    """Tests for run_speech_consumer."""

    @pytest.mark.asyncio
    async def test_forwards_events_to_engine(self):
        """Test that each event is spoken and reported."""
        bridge = SpeechBridge()
        engine = RecordingEngine()
        reported: list[tuple[str, str]] = []

        bridge.speak("hello")
        bridge.close()
        await run_speech_consumer(bridge, engine, on_spoken=lambda t, r: reported.append((t, r)))

        assert engine.spoken == ["hello"]
        assert reported == [("hello", "spoken:hello")]

    @pytest.mark.asyncio
    async def test_newer_event_interrupts_speech(self):
        """Test that a new request cancels speech already in progress."""
        bridge = SpeechBridge()
        engine = RecordingEngine()
        consumer = asyncio.create_task(run_speech_consumer(bridge, engine))

        bridge.speak("slow")
        await _wait_for(lambda: engine.started == ["slow"])

        bridge.speak("fast")
        await _wait_for(lambda: engine.spoken == ["fast"])

        bridge.close()
        await asyncio.wait_for(consumer, timeout=1)

        assert engine.cancelled == ["slow"]
        assert engine.spoken == ["fast"]

    @pytest.mark.asyncio
    async def test_engine_failure_is_logged(self, caplog):
        """Test that a failing engine does not stop the consumer."""
        bridge = SpeechBridge()
        engine = RecordingEngine(fail_on="broken")
        reported: list[str] = []
        consumer = asyncio.create_task(
            run_speech_consumer(bridge, engine, on_spoken=lambda t, r: reported.append(t))
        )

        bridge.speak("broken")
        await _wait_for(lambda: engine.started == ["broken"])
        await asyncio.sleep(0)
        bridge.speak("fine")
        bridge.close()
        await asyncio.wait_for(consumer, timeout=1)

        assert "Speech synthesis failed" in caplog.text
        assert reported == ["fine"]

    @pytest.mark.asyncio
    async def test_close_while_speaking_waits_for_last_request(self):
        """Test that closing lets the last request finish."""
        bridge = SpeechBridge()
        engine = RecordingEngine()
        bridge.speak("one")
        bridge.close()

        await asyncio.wait_for(run_speech_consumer(bridge, engine), timeout=1)

        assert engine.spoken == ["one"]


class TestGTTSSpeechEngine:
    """Tests for the gTTS-backed engine."""

    @pytest.mark.asyncio
    async def test_speak_writes_mp3(self, tmp_path, monkeypatch):
        """Test that speech is synthesized into the output directory."""
        calls: list[tuple[str, str]] = []

        class FakeTTS:
            def __init__(self, text, lang="en"):
                calls.append((text, lang))

            def save(self, path):
                with open(path, "wb") as f:
                    f.write(b"ID3")

        monkeypatch.setattr("gtts.gTTS", FakeTTS)
        engine = GTTSSpeechEngine(output_dir=tmp_path / "out", lang="uk")

        path = await engine.speak("Привіт")

        assert calls == [("Привіт", "uk")]
        assert path.parent == tmp_path / "out"
        assert path.suffix == ".mp3"
        assert path.read_bytes() == b"ID3"

    @pytest.mark.asyncio
    async def test_speak_to_explicit_path(self, tmp_path, monkeypatch):
        """Test that an explicit target path is honoured."""

        class FakeTTS:
            def __init__(self, text, lang="en"):
                pass

            def save(self, path):
                with open(path, "wb") as f:
                    f.write(b"ID3")

        monkeypatch.setattr("gtts.gTTS", FakeTTS)
        engine = GTTSSpeechEngine(lang="en")
        target = tmp_path / "reply.mp3"

        assert await engine.speak("hello", path=target) == target
        assert target.exists()

    def test_cancelled_request_writes_no_file(self, tmp_path, monkeypatch):
        """Test that a request cancelled before download skips saving."""
        saved: list[str] = []

        class FakeTTS:
            def __init__(self, text, lang="en"):
                pass

            def save(self, path):
                saved.append(path)

        monkeypatch.setattr("gtts.gTTS", FakeTTS)
        engine = GTTSSpeechEngine(output_dir=tmp_path, lang="en")
        cancelled = threading.Event()
        cancelled.set()

        assert engine._synthesize("hello", tmp_path / "x.mp3", cancelled) is None
        assert saved == []
        assert not (tmp_path / "x.mp3").exists()

    @pytest.mark.asyncio
    async def test_cancel_signals_worker_thread(self, tmp_path, monkeypatch):
        """Test that cancelling speak() tells the worker thread to stop."""
        started = threading.Event()
        release = threading.Event()
        seen: list[bool] = []

        def slow_synthesize(text, path, cancelled):
            started.set()
            release.wait(timeout=5)
            seen.append(cancelled.is_set())
            return None

        engine = GTTSSpeechEngine(output_dir=tmp_path, lang="en")
        monkeypatch.setattr(engine, "_synthesize", slow_synthesize)

        task = asyncio.create_task(engine.speak("hello"))
        for _ in range(500):
            if started.is_set():
                break
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        release.set()
        for _ in range(500):
            if seen:
                break
            await asyncio.sleep(0.01)
        assert seen == [True]

    def test_language_defaults_to_locale(self, monkeypatch):
        """Test that the engine falls back to the locale language."""
        monkeypatch.setattr(speech_module.locale, "getlocale", lambda: ("uk_UA", "UTF-8"))
        assert GTTSSpeechEngine().lang == "uk"


class TestDefaultLanguage:
    """Tests for default_language."""

    @pytest.mark.parametrize(
        "locale_value,expected",
        [
            (("en_US", "UTF-8"), "en"),
            (("uk_UA", "UTF-8"), "uk"),
            (("de_DE", None), "de"),
            ((None, None), "en"),
            (("C", None), "en"),
            (("POSIX", None), "en"),
        ],
    )
    def test_language_from_locale(self, monkeypatch, locale_value, expected):
        """Test locale to language code mapping."""
        monkeypatch.setattr(speech_module.locale, "getlocale", lambda: locale_value)
        assert default_language() == expected
