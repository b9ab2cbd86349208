"""
Generation service capabilities.

The pipeline depends only on the two abstract capabilities defined here,
TextGenerator and SpeechSynthesizer, which are injected by the caller.
The concrete adapters talk to an OpenAI-compatible chat endpoint (text) and
to the Gemini generateContent REST endpoint (multi-speaker speech).
"""

import asyncio
import logging
import random
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import openai
from openai import AsyncOpenAI

from audio_overview.config import Settings, TTS_SAMPLE_RATE
from audio_overview.errors import GenerationFailed

logger = logging.getLogger(__name__)

_RATE_RE = re.compile(r"rate=(\d+)")


def strip_think_blocks(text: str) -> str:
    """Remove <think>...</think> blocks from LLM output."""
    return re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL).strip()


@dataclass
class Completion:
    text: str
    grounding_metadata: Optional[Dict[str, Any]] = None


@dataclass
class SynthesisResult:
    audio_base64_pcm: str
    sample_rate_hz: int = TTS_SAMPLE_RATE


class TextGenerator(ABC):
    """Text and structured (JSON) completion."""

    @abstractmethod
    async def complete(
        self,
        model: str,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        response_format: str = "text",
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> Completion:
        """Return the model's reply; raise GenerationFailed if there is none."""


class SpeechSynthesizer(ABC):
    """Text-to-speech returning base64 linear PCM."""

    @abstractmethod
    async def synthesize(
        self,
        model: str,
        transcript: str,
        *,
        speaker_voice_map: Dict[str, str],
    ) -> SynthesisResult:
        """Synthesize a speaker-tagged transcript with one voice per channel."""

    @abstractmethod
    async def speak(self, model: str, text: str, *, voice: str) -> SynthesisResult:
        """Synthesize text with a single voice."""


# ---------------------------------------------------------------------------
# OpenAI-compatible text generation
# ---------------------------------------------------------------------------
class OpenAITextGenerator(TextGenerator):
    """TextGenerator over an OpenAI-compatible chat completions endpoint.

    Retries transient transport failures (connection, timeout, 5xx) with
    exponential backoff + jitter: ~5s, ~10s, ~20s. Rejected requests
    (bad request, authentication) fail immediately.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or Settings.from_env()
        self.max_retries = self.settings.llm_max_retries
        self.client = client or AsyncOpenAI(
            base_url=self.settings.llm_base_url,
            api_key=self.settings.llm_api_key or "NA",
            timeout=self.settings.llm_timeout,
            max_retries=0,
        )

    async def complete(
        self,
        model: str,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        response_format: str = "text",
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> Completion:
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})
        create_kwargs: Dict[str, Any] = dict(model=model, messages=messages)
        if response_format == "json":
            create_kwargs["response_format"] = {"type": "json_object"}
        if tools:
            create_kwargs["tools"] = tools

        for attempt in range(self.max_retries + 1):
            try:
                resp = await self.client.chat.completions.create(**create_kwargs)
                break
            except (openai.BadRequestError, openai.AuthenticationError) as e:
                logger.error("  %s rejected the request: %s", model, e)
                raise GenerationFailed(f"Generation request rejected by {model}: {e}") from e
            except (ConnectionError, TimeoutError, OSError,
                    openai.APIConnectionError, openai.APITimeoutError,
                    openai.InternalServerError) as e:
                if attempt < self.max_retries:
                    base_wait = 5 * (2 ** attempt)  # 5, 10, 20
                    jitter = random.uniform(-base_wait * 0.3, base_wait * 0.3)
                    wait = base_wait + jitter
                    logger.warning(
                        "  complete() attempt %d/%d failed (%s), retrying in %.1fs...",
                        attempt + 1, self.max_retries + 1, type(e).__name__, wait,
                    )
                    await asyncio.sleep(wait)
                else:
                    logger.error("  complete() failed after %d attempts: %s", self.max_retries + 1, e)
                    raise GenerationFailed(f"Generation call to {model} failed: {e}") from e
            except openai.APIError as e:
                raise GenerationFailed(f"Generation call to {model} failed: {e}") from e

        content = resp.choices[0].message.content if resp.choices else None
        text = strip_think_blocks(content or "")
        if not text:
            raise GenerationFailed(f"{model} returned no text")
        return Completion(text=text)

    async def aclose(self) -> None:
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()


# ---------------------------------------------------------------------------
# Gemini speech synthesis
# ---------------------------------------------------------------------------
def _voice_config(voice: str) -> dict:
    return {"prebuiltVoiceConfig": {"voiceName": voice}}


def build_speech_request(text: str, *, speaker_voice_map: Optional[Dict[str, str]] = None,
                         voice: Optional[str] = None) -> dict:
    """generateContent body requesting AUDIO output.

    Multi-speaker when speaker_voice_map is given, single voice otherwise.
    """
    if speaker_voice_map:
        speech_config = {
            "multiSpeakerVoiceConfig": {
                "speakerVoiceConfigs": [
                    {"speaker": speaker, "voiceConfig": _voice_config(v)}
                    for speaker, v in speaker_voice_map.items()
                ]
            }
        }
    else:
        speech_config = {"voiceConfig": _voice_config(voice or "Aoede")}
    return {
        "contents": [{"parts": [{"text": text}]}],
        "generationConfig": {
            "responseModalities": ["AUDIO"],
            "speechConfig": speech_config,
        },
    }


def extract_inline_audio(payload: dict) -> Optional[SynthesisResult]:
    """First inline audio part of a generateContent response, or None."""
    for candidate in payload.get("candidates") or []:
        for part in (candidate.get("content") or {}).get("parts") or []:
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                mime = inline.get("mimeType") or inline.get("mime_type") or ""
                match = _RATE_RE.search(mime)
                rate = int(match.group(1)) if match else TTS_SAMPLE_RATE
                return SynthesisResult(audio_base64_pcm=inline["data"], sample_rate_hz=rate)
    return None


class GeminiSpeechSynthesizer(SpeechSynthesizer):
    """SpeechSynthesizer over the Gemini generateContent REST endpoint.

    One request per call, no retry.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or Settings.from_env()
        self.client = client or httpx.AsyncClient(timeout=self.settings.tts_timeout)

    async def _generate(self, model: str, body: dict) -> SynthesisResult:
        url = f"{self.settings.tts_base_url.rstrip('/')}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self.settings.tts_api_key, "Content-Type": "application/json"}
        try:
            resp = await self.client.post(url, json=body, headers=headers)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("  Speech synthesis HTTP %d: %s", e.response.status_code, e.response.text[:200])
            raise GenerationFailed(f"Speech synthesis failed: HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("  Speech synthesis request failed: %s", e)
            raise GenerationFailed(f"Speech synthesis failed: {e}") from e

        result = extract_inline_audio(payload)
        if result is None:
            raise GenerationFailed("Failed to synthesize audio: response contained no audio data")
        return result

    async def synthesize(self, model: str, transcript: str, *,
                         speaker_voice_map: Dict[str, str]) -> SynthesisResult:
        body = build_speech_request(transcript, speaker_voice_map=speaker_voice_map)
        return await self._generate(model, body)

    async def speak(self, model: str, text: str, *, voice: str) -> SynthesisResult:
        return await self._generate(model, build_speech_request(text, voice=voice))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()
