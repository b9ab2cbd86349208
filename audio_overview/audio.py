"""Decoding of synthesized PCM into a playable WAV resource."""

import base64
import binascii
import io
import logging
import wave
from dataclasses import dataclass
from pathlib import Path

from audio_overview.config import TTS_SAMPLE_RATE
from audio_overview.errors import GenerationFailed

logger = logging.getLogger(__name__)

SAMPLE_WIDTH = 2  # 16-bit linear PCM
CHANNELS = 1


def decode_pcm_base64(data: str) -> bytes:
    try:
        pcm = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise GenerationFailed(f"Synthesized audio is not valid base64: {e}") from e
    if not pcm:
        raise GenerationFailed("Synthesized audio is empty")
    return pcm


def pcm_to_wav(pcm: bytes, sample_rate: int = TTS_SAMPLE_RATE,
               channels: int = CHANNELS, sample_width: int = SAMPLE_WIDTH) -> bytes:
    """Wrap raw little-endian PCM frames in a WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buf.getvalue()


@dataclass(frozen=True)
class AudioResource:
    """A WAV buffer with a self-contained data URL as its handle."""
    wav_bytes: bytes
    sample_rate: int = TTS_SAMPLE_RATE

    @property
    def data_url(self) -> str:
        return "data:audio/wav;base64," + base64.b64encode(self.wav_bytes).decode("ascii")

    @property
    def duration_seconds(self) -> float:
        with wave.open(io.BytesIO(self.wav_bytes), "rb") as wf:
            return wf.getnframes() / float(wf.getframerate())

    def save(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.wav_bytes)
        logger.info("  Audio saved: %s (%.1fs)", path, self.duration_seconds)
        return path


def audio_resource_from_base64(data: str, sample_rate: int = TTS_SAMPLE_RATE) -> AudioResource:
    return AudioResource(wav_bytes=pcm_to_wav(decode_pcm_base64(data), sample_rate), sample_rate=sample_rate)
