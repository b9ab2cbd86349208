"""Shared pytest fixtures for the audio_overview test suite."""

import base64
import json

import pytest

from audio_overview.clients import Completion, SpeechSynthesizer, SynthesisResult, TextGenerator
from audio_overview.models import Source


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set minimum env vars so clients can be built without real services."""
    monkeypatch.setenv("LLM_BASE_URL", "http://localhost:9999/v1")
    monkeypatch.setenv("LLM_API_KEY", "NA")
    monkeypatch.setenv("FAST_MODEL_NAME", "test-fast")
    monkeypatch.setenv("CREATIVE_MODEL_NAME", "test-creative")
    monkeypatch.setenv("TTS_MODEL_NAME", "test-tts")
    monkeypatch.setenv("TTS_BASE_URL", "http://localhost:9998/v1beta")
    monkeypatch.setenv("TTS_API_KEY", "NA")


class FakeTextGenerator(TextGenerator):
    """Returns queued replies in order and records every call."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    async def complete(self, model, prompt, *, system_instruction=None,
                       response_format="text", tools=None):
        self.calls.append({"model": model, "prompt": prompt, "response_format": response_format})
        if not self.replies:
            raise AssertionError("FakeTextGenerator ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        return Completion(text=reply)


class FakeSpeechSynthesizer(SpeechSynthesizer):
    """Returns fixed PCM and records every call."""

    def __init__(self, pcm=b"\x00\x01" * 240, sample_rate=24000):
        self.audio = base64.b64encode(pcm).decode("ascii") if pcm else ""
        self.sample_rate = sample_rate
        self.calls = []

    async def synthesize(self, model, transcript, *, speaker_voice_map):
        self.calls.append({"model": model, "transcript": transcript, "voices": dict(speaker_voice_map)})
        return SynthesisResult(audio_base64_pcm=self.audio, sample_rate_hz=self.sample_rate)

    async def speak(self, model, text, *, voice):
        self.calls.append({"model": model, "text": text, "voice": voice})
        return SynthesisResult(audio_base64_pcm=self.audio, sample_rate_hz=self.sample_rate)


@pytest.fixture
def sample_sources():
    return [
        Source(id="s1", title="Sleep and Memory", content="Sleep consolidates memory. " * 50, type="file"),
        Source(id="s2", title="Caffeine Review", content="Caffeine blocks adenosine receptors.", type="web"),
    ]


@pytest.fixture
def sample_blueprint():
    return {
        "angle": "Why a nap can beat a coffee",
        "structure": ["Hook", "Memory consolidation", "Caffeine trade-offs", "Takeaway"],
        "keyClaims": [{"claim": "Sleep consolidates memory", "requiresSourceId": "s1"}],
        "controversialPoint": "Is caffeine a substitute for sleep?",
    }


def make_script(turn_count=6, bad_citation_turn=2):
    """Writer output with turn_count turns; one turn also cites unknown 's9'."""
    turns = []
    for i in range(turn_count):
        citations = [{"sourceId": "s1", "note": "memory"}] if i % 2 == 0 else []
        if i == bad_citation_turn:
            citations = [{"sourceId": "s2"}, {"sourceId": "s9", "note": "invented"}]
        turns.append({
            "speaker": "Nova" if i % 2 == 0 else "Atlas",
            "text": f"Line {i}",
            "pauseMsAfter": 300,
            "citations": citations,
        })
    return {
        "coldOpen": "What if your best study tool is your pillow?",
        "turns": turns,
        "factChecks": [
            {"claim": "Sleep consolidates memory", "sourceId": "s1", "evidenceSnippet": "Sleep consolidates memory."},
            {"claim": "Invented fact", "sourceId": "s9", "evidenceSnippet": "nothing"},
        ],
    }


@pytest.fixture
def fake_generator_factory():
    return FakeTextGenerator


@pytest.fixture
def fake_synthesizer():
    return FakeSpeechSynthesizer()


@pytest.fixture
def script_factory():
    return make_script


@pytest.fixture
def synthesizer_factory():
    return FakeSpeechSynthesizer
