"""
Persona -> synthesis channel -> voice table.

The speech model speaks a two-speaker transcript labelled with generic
channel names; the voice is bound to the channel, not to the persona the
listener hears about. The bindings below are fixed.
"""

from enum import Enum
from typing import Dict, NamedTuple

from audio_overview.models import AudioOverviewDialogue


class Persona(Enum):
    NOVA = "Nova"
    ATLAS = "Atlas"


class Channel(Enum):
    JANE = "Jane"
    JOE = "Joe"


class VoiceBinding(NamedTuple):
    channel: Channel
    voice_id: str


VOICE_TABLE: Dict[Persona, VoiceBinding] = {
    Persona.NOVA: VoiceBinding(Channel.JANE, "Aoede"),
    Persona.ATLAS: VoiceBinding(Channel.JOE, "Puck"),
}

# Cold open is read on this channel.
COLD_OPEN_CHANNEL = VOICE_TABLE[Persona.NOVA].channel


def channel_for(speaker: str) -> Channel:
    """Nova speaks on Jane; every other speaker on Joe."""
    if speaker == Persona.NOVA.value:
        return VOICE_TABLE[Persona.NOVA].channel
    return VOICE_TABLE[Persona.ATLAS].channel


def speaker_voice_map() -> Dict[str, str]:
    """{channel label: voice id} for both channels."""
    return {binding.channel.value: binding.voice_id for binding in VOICE_TABLE.values()}


def build_tts_transcript(dialogue: AudioOverviewDialogue) -> str:
    """Render the dialogue as "<channel>: <text>" lines for the speech model."""
    lines = []
    if dialogue.cold_open:
        lines.append(f"{COLD_OPEN_CHANNEL.value}: {dialogue.cold_open}\n\n")
    for turn in dialogue.turns:
        lines.append(f"{channel_for(turn.speaker).value}: {turn.text}\n")
    return "".join(lines)
