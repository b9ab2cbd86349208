"""TTS synthesis stage: dialogue -> two-channel transcript -> WAV resource."""

import logging

from audio_overview.audio import AudioResource, audio_resource_from_base64
from audio_overview.clients import SpeechSynthesizer
from audio_overview.config import SPEAK_TEXT_MAX_CHARS
from audio_overview.errors import GenerationFailed
from audio_overview.models import AudioOverviewDialogue
from audio_overview.voices import VOICE_TABLE, Persona, build_tts_transcript, speaker_voice_map

logger = logging.getLogger(__name__)

TTS_INSTRUCTION = "Generate audio for this dialogue:\n\n"


async def synthesize_dialogue_audio(
    dialogue: AudioOverviewDialogue,
    *,
    synthesizer: SpeechSynthesizer,
    model: str,
) -> AudioResource:
    """Synthesize the whole dialogue in one call.

    Raises GenerationFailed when the service returns no audio. Not retried.
    """
    transcript = build_tts_transcript(dialogue)
    logger.info("  Synthesizing %d turns (%d chars) with %s", len(dialogue.turns), len(transcript), model)
    result = await synthesizer.synthesize(
        model, TTS_INSTRUCTION + transcript, speaker_voice_map=speaker_voice_map()
    )
    if not result.audio_base64_pcm:
        raise GenerationFailed("Failed to synthesize audio.")
    return audio_resource_from_base64(result.audio_base64_pcm, result.sample_rate_hz)


async def speak_text(
    text: str,
    *,
    synthesizer: SpeechSynthesizer,
    model: str,
    voice: str = VOICE_TABLE[Persona.NOVA].voice_id,
) -> AudioResource:
    """Single-voice narration of up to SPEAK_TEXT_MAX_CHARS characters."""
    safe_text = text[:SPEAK_TEXT_MAX_CHARS]
    if not safe_text.strip():
        raise GenerationFailed("Speech generation failed: nothing to speak")
    result = await synthesizer.speak(model, safe_text, voice=voice)
    if not result.audio_base64_pcm:
        raise GenerationFailed("Failed to generate speech data")
    return audio_resource_from_base64(result.audio_base64_pcm, result.sample_rate_hz)
