"""
Pydantic models for sources, the ephemeral blueprint, and the persisted
audio overview dialogue.

Field names follow the persisted artifact shape consumed by the UI
(camelCase aliases); Python code uses the snake_case attribute names.
"""

import time
import uuid
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


DurationHint = Literal["short", "medium", "long"]
SpeakerName = Literal["Nova", "Atlas"]

WORD_TARGETS: Dict[str, int] = {"short": 600, "medium": 1200, "long": 1800}

PAUSE_MS_MIN = 150
PAUSE_MS_MAX = 900
PAUSE_MS_DEFAULT = 400


def now_ms() -> int:
    return int(time.time() * 1000)


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------
class SourceMetadata(CamelModel):
    origin_url: Optional[str] = None
    scrape_success: Optional[bool] = None


class Source(CamelModel):
    """An ingested document. Immutable once created."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    content: str
    type: str = "text"
    created_at: int = Field(default_factory=now_ms)
    metadata: Optional[SourceMetadata] = None


class PackedSource(CamelModel):
    """Prompt-sized view of a Source."""
    id: str
    title: str
    content_excerpt: str
    type: str


def _scalar_text(v):
    """None -> "", numbers -> str; anything else is left for pydantic to check."""
    if v is None:
        return ""
    if isinstance(v, (int, float)):
        return str(v)
    return v


# ---------------------------------------------------------------------------
# Blueprint (never persisted)
# ---------------------------------------------------------------------------
class KeyClaim(CamelModel):
    claim: str = ""
    requires_source_id: str = ""

    @field_validator("claim", "requires_source_id", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _scalar_text(v)


class Blueprint(CamelModel):
    """Outline produced by the blueprint stage.

    Every field has an empty default and nulls or numbers are coerced: an
    incomplete blueprint is passed on to the dialogue stage as-is.
    """
    angle: str = ""
    structure: List[str] = Field(default_factory=list)
    key_claims: List[KeyClaim] = Field(default_factory=list)
    controversial_point: str = ""

    @field_validator("angle", "controversial_point", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _scalar_text(v)

    @field_validator("structure", mode="before")
    @classmethod
    def coerce_structure(cls, v):
        if isinstance(v, str):
            return [v]
        if not isinstance(v, list):
            return []
        return [str(s) if isinstance(s, (int, float)) else s for s in v if isinstance(s, (str, int, float))]

    @field_validator("key_claims", mode="before")
    @classmethod
    def coerce_key_claims(cls, v):
        if not isinstance(v, list):
            return []
        return [{"claim": c} if isinstance(c, str) else c for c in v if isinstance(c, (str, dict))]


# ---------------------------------------------------------------------------
# Dialogue
# ---------------------------------------------------------------------------
class Citation(CamelModel):
    source_id: str
    note: Optional[str] = None


class DialogueTurn(CamelModel):
    """One spoken turn. Only a missing text makes a turn unusable."""
    speaker: SpeakerName = "Atlas"
    text: str
    pause_ms_after: int = PAUSE_MS_DEFAULT
    citations: List[Citation] = Field(default_factory=list)

    @field_validator("speaker", mode="before")
    @classmethod
    def normalize_speaker(cls, v):
        # Anyone who is not Nova speaks on Atlas's channel.
        if isinstance(v, str) and v.strip().lower() == "nova":
            return "Nova"
        return "Atlas"

    @field_validator("text", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return str(v) if isinstance(v, (int, float)) else v

    @field_validator("citations", mode="before")
    @classmethod
    def drop_unusable_citations(cls, v):
        # Entries without any sourceId cannot be validated; bare strings are ids.
        if not isinstance(v, list):
            return []
        kept = []
        for c in v:
            if isinstance(c, str):
                kept.append({"sourceId": c})
            elif isinstance(c, dict):
                source_id = c.get("sourceId", c.get("source_id"))
                if source_id is not None:
                    note = c.get("note")
                    if note is not None and not isinstance(note, str):
                        note = str(note)
                    kept.append({"sourceId": str(source_id), "note": note})
        return kept

    @field_validator("pause_ms_after", mode="before")
    @classmethod
    def clamp_pause(cls, v):
        if v is None:
            return PAUSE_MS_DEFAULT
        try:
            v = int(float(v))
        except (TypeError, ValueError):
            return PAUSE_MS_DEFAULT
        return max(PAUSE_MS_MIN, min(PAUSE_MS_MAX, v))


class FactCheck(CamelModel):
    """A claim tied to a source. Without a sourceId it cannot be checked."""
    claim: str = ""
    source_id: str
    evidence_snippet: str = ""

    @field_validator("claim", "evidence_snippet", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _scalar_text(v)

    @field_validator("source_id", mode="before")
    @classmethod
    def coerce_source_id(cls, v):
        return str(v) if isinstance(v, (int, float)) else v


class HostDescriptor(CamelModel):
    name: str
    persona: str


HOSTS: Dict[str, HostDescriptor] = {
    "nova": HostDescriptor(name="Nova", persona="Calm, grounded, explainer"),
    "atlas": HostDescriptor(name="Atlas", persona="Energetic, curious, explorer"),
}


class AudioOverviewDialogue(CamelModel):
    """The persisted audio overview artifact."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    topic: str
    duration_hint: DurationHint
    created_at: int = Field(default_factory=now_ms)
    hosts: Dict[str, HostDescriptor] = Field(default_factory=lambda: dict(HOSTS))
    cold_open: str = ""
    turns: List[DialogueTurn] = Field(default_factory=list)
    fact_checks: List[FactCheck] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    audio_url: Optional[str] = None

    def with_audio(self, audio_url: str) -> "AudioOverviewDialogue":
        """Copy of this dialogue with its audio resource attached."""
        return self.model_copy(update={"audio_url": audio_url})

    def transcript_text(self) -> str:
        """Plain "Speaker: text" script, one turn per paragraph."""
        return "\n\n".join(f"{t.speaker}: {t.text}" for t in self.turns)
