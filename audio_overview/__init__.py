"""
Audio overview generation: a grounded two-host dialogue built from notebook
sources, and its synthesis into speech.

  from audio_overview import generate_audio_overview_dialogue, synthesize_dialogue_audio
  from audio_overview.clients import OpenAITextGenerator, GeminiSpeechSynthesizer
"""

from audio_overview.errors import GenerationFailed, MalformedResponse, NoSources
from audio_overview.models import AudioOverviewDialogue, Source
from audio_overview.pipeline import generate_audio_overview_dialogue, infer_topic
from audio_overview.synthesis import speak_text, synthesize_dialogue_audio

__version__ = "0.1.0"

__all__ = [
    "AudioOverviewDialogue",
    "GenerationFailed",
    "MalformedResponse",
    "NoSources",
    "Source",
    "generate_audio_overview_dialogue",
    "infer_topic",
    "speak_text",
    "synthesize_dialogue_audio",
]
