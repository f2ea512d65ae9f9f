from __future__ import annotations

import logging
import wave
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Callable, Optional

import numpy as np
import pyaudio
import pyttsx3

logger = logging.getLogger(__name__)


def ensure_alarm_sound(path: Path, duration_seconds: float = 1.5) -> None:
    if path.exists():
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    sample_rate = 24000
    freq = 880.0
    amplitude = 0.4
    t = np.arange(int(duration_seconds * sample_rate)) / sample_rate
    # 250 ms beeps separated by 250 ms of silence
    gate = (t % 0.5) < 0.25
    samples = (32767 * amplitude * np.sin(2 * np.pi * freq * t) * gate).astype("<i2")
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(samples.tobytes())
    logger.info("Generated default alarm sound at %s", path)


class AlarmSoundPlayer:
    """Loops a WAV file through PyAudio until stopped.

    ``start_loop`` raises if the sound cannot be opened or the output device
    is unavailable; callers decide how to report that.
    """

    def __init__(self, sound_path: Path, frames_per_buffer: int = 1024):
        self.sound_path = sound_path
        self.frames_per_buffer = frames_per_buffer
        self._stop_event = Event()
        self._play_thread: Optional[Thread] = None
        self._pa: Optional[pyaudio.PyAudio] = None
        self._stream = None

    @property
    def is_playing(self) -> bool:
        return self._play_thread is not None and self._play_thread.is_alive()

    def start_loop(self) -> None:
        if self.is_playing:
            return
        ensure_alarm_sound(self.sound_path)
        with wave.open(str(self.sound_path), "rb") as wav:
            width = wav.getsampwidth()
            channels = wav.getnchannels()
            rate = wav.getframerate()
            frames = wav.readframes(wav.getnframes())
        if not frames:
            raise ValueError(f"Alarm sound {self.sound_path} is empty")

        if self._pa is None:
            self._pa = pyaudio.PyAudio()
        if self._stream is None:
            self._stream = self._pa.open(
                format=self._pa.get_format_from_width(width),
                channels=channels,
                rate=rate,
                output=True,
            )
        chunk_bytes = self.frames_per_buffer * width * channels
        self._stop_event.clear()
        self._play_thread = Thread(
            target=self._play_loop, args=(self._stream, frames, chunk_bytes), name="alarm-sound", daemon=True
        )
        self._play_thread.start()
        logger.info("Alarm sound started (%s)", self.sound_path)

    def stop_loop(self) -> None:
        self._stop_event.set()
        if self._play_thread is not None:
            self._play_thread.join(timeout=1)
            self._play_thread = None

    def release(self) -> None:
        self.stop_loop()
        if self._stream is not None:
            try:
                self._stream.stop_stream()
                self._stream.close()
            finally:
                self._stream = None
        if self._pa is not None:
            self._pa.terminate()
            self._pa = None

    def _play_loop(self, stream, frames: bytes, chunk_bytes: int) -> None:  # pragma: no cover - audio device loop
        while not self._stop_event.is_set():
            for offset in range(0, len(frames), chunk_bytes):
                if self._stop_event.is_set():
                    return
                try:
                    stream.write(frames[offset : offset + chunk_bytes])
                except OSError:
                    logger.warning("Alarm sound output failed, stopping playback", exc_info=True)
                    return


class LocalSpeaker:
    """Speaks alarm confirmations ("Alarm set for ...") through pyttsx3.

    Speech is optional: when no engine can be created every call is a no-op
    returning False, and the console output stays the only feedback.
    """

    def __init__(self, rate: int = 185, engine_factory: Callable[[], object] = pyttsx3.init):
        self._lock = Lock()
        self._engine = None
        try:
            self._engine = engine_factory()
        except Exception:
            logger.warning("Speech engine unavailable, spoken confirmations disabled", exc_info=True)
            return
        try:
            self._engine.setProperty("rate", rate)
        except Exception:
            logger.debug("Speech engine rejected rate %s", rate)

    @property
    def available(self) -> bool:
        return self._engine is not None

    def speak(self, text: str) -> bool:
        """Speak ``text`` and block until done. Utterances never overlap."""

        if self._engine is None or not text.strip():
            return False
        with self._lock:
            try:
                self._engine.say(text)
                self._engine.runAndWait()
            except Exception:
                logger.error("Failed to speak confirmation", exc_info=True)
                return False
        return True

    def speak_async(self, text: str) -> bool:
        if self._engine is None or not text.strip():
            return False
        Thread(target=self.speak, args=(text,), name="confirmation-speech", daemon=True).start()
        return True
