"""Tone sinks: turn a frequency into an audible (or recorded) decaying sine tone."""

from __future__ import annotations

import os
import wave
from abc import ABC, abstractmethod

import numpy as np

DEFAULT_SAMPLE_RATE = 44100
TONE_DURATION = 1.5  # seconds
TONE_GAIN = 0.5
TONE_FLOOR = 0.01  # gain reached at the end of the decay


def render_tone(
    frequency: float,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    duration: float = TONE_DURATION,
    gain: float = TONE_GAIN,
    floor: float = TONE_FLOOR,
) -> np.ndarray:
    """
    Synthesize a sine tone with an exponential decay envelope.

    The gain ramps exponentially from ``gain`` to ``floor`` over ``duration``.

    Args:
        frequency:   Tone frequency in Hz.
        sample_rate: Samples per second.
        duration:    Tone length in seconds.
        gain:        Starting amplitude (0-1).
        floor:       Final amplitude (0-1, must be positive for the ramp).

    Returns:
        float32 array of ``int(sample_rate * duration)`` samples.

    Raises:
        ValueError: If frequency, sample rate, duration, gain or floor is not positive.
    """
    if frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}.")
    if sample_rate <= 0 or duration <= 0:
        raise ValueError("sample_rate and duration must be positive.")
    if gain <= 0 or floor <= 0:
        raise ValueError("gain and floor must be positive for an exponential ramp.")

    n_samples = int(sample_rate * duration)
    t = np.arange(n_samples) / sample_rate
    envelope = gain * (floor / gain) ** (t / duration)
    return (envelope * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


class ToneSink(ABC):
    """Abstract destination for tones produced by accepted taps."""

    def __init__(self, sample_rate: int = DEFAULT_SAMPLE_RATE, duration: float = TONE_DURATION) -> None:
        self.sample_rate = sample_rate
        self.duration = duration

    def render(self, frequency: float) -> np.ndarray:
        return render_tone(frequency, sample_rate=self.sample_rate, duration=self.duration)

    @abstractmethod
    def play(self, frequency: float) -> object:
        """Emit one tone at ``frequency`` Hz."""


class SoundDeviceSink(ToneSink):
    """Play tones on the default output device through sounddevice."""

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        duration: float = TONE_DURATION,
        blocking: bool = False,
    ) -> None:
        super().__init__(sample_rate=sample_rate, duration=duration)
        self.blocking = blocking

    def play(self, frequency: float) -> None:
        """
        Raises:
            OSError: If the output device cannot be opened or written.
        """
        import sounddevice as sd

        try:
            # A new tone replaces whatever is still sounding
            sd.play(self.render(frequency), samplerate=self.sample_rate, blocking=self.blocking)
        except sd.PortAudioError as exc:
            raise OSError(str(exc)) from exc

    def wait(self) -> None:
        """Block until the current tone has finished."""
        import sounddevice as sd

        try:
            sd.wait()
        except sd.PortAudioError as exc:
            raise OSError(str(exc)) from exc


class WavFileSink(ToneSink):
    """
    Write each tone to a 16-bit mono WAV file.

    The first tone goes to ``path`` (".wav" is appended if it has no
    extension); later tones go to ``<stem>-2.wav``,
    ``<stem>-3.wav`` and so on.
    """

    def __init__(
        self,
        path: str,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        duration: float = TONE_DURATION,
    ) -> None:
        super().__init__(sample_rate=sample_rate, duration=duration)
        if not os.path.splitext(path)[1]:
            path += ".wav"
        self.path = path
        self.written: list[str] = []

    def _next_path(self) -> str:
        if not self.written:
            return self.path
        stem, ext = os.path.splitext(self.path)
        return f"{stem}-{len(self.written) + 1}{ext}"

    def play(self, frequency: float) -> str:
        """
        Render and write one tone.

        Returns:
            Path of the written file.

        Raises:
            OSError: If the file cannot be written.
        """
        samples = self.render(frequency)
        pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")
        path = self._next_path()

        with wave.open(path, "wb") as wav:
            wav.setnchannels(1)
            wav.setsampwidth(2)
            wav.setframerate(self.sample_rate)
            wav.writeframes(pcm.tobytes())

        self.written.append(path)
        return path
