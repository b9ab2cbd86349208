"""
Dialogue stage: the full two-host script from the creative tier.

The style rules in the prompt are instructions to the model only; nothing
here rejects a script for breaking them. Citation existence is enforced
later, by validation.validate_citations().
"""

import json
import logging
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from audio_overview.clients import TextGenerator
from audio_overview.errors import MalformedResponse
from audio_overview.json_repair import parse_with_model_repair
from audio_overview.models import (
    WORD_TARGETS,
    Blueprint,
    DialogueTurn,
    FactCheck,
    PackedSource,
)
from audio_overview.sources import packed_sources_json

logger = logging.getLogger(__name__)

PERSONAS = (
    "- Nova (Host A): Calm, grounded, slightly slower, clear explainer. The anchor.\n"
    "- Atlas (Host B): Energetic, curious, fast-paced, asks sharp questions, pushes for examples. The explorer.\n"
)

STRICT_RULES = (
    "1. SOUND REAL: Use contractions (\"can't\"), interjections (\"huh\", \"wow\", \"wait\"), and natural flow.\n"
    "2. NO ROBOTIC TRANSITIONS: Ban \"Firstly\", \"In conclusion\". Use natural segues.\n"
    "3. INTERACTION: Hosts must react to each other. No alternating monologues.\n"
    "4. CURIOSITY: Include 2 moments of \"Wait, so what does that imply?\"\n"
    "5. DISAGREEMENT: Include 1 friendly disagreement resolving with evidence.\n"
    "6. GROUNDING: EVERY substantive claim must cite a sourceId. If conversational, citations can be empty.\n"
    "7. COLD OPEN: Start with a hook (1-2 lines). No \"Welcome to the show\".\n"
)

OUTPUT_SCHEMA = (
    "{\n"
    '  "coldOpen": "string",\n'
    '  "turns": [\n'
    "    {\n"
    '      "speaker": "Nova" | "Atlas",\n'
    '      "text": "dialogue string",\n'
    '      "pauseMsAfter": number (150-900),\n'
    '      "citations": [ { "sourceId": "string", "note": "optional context" } ]\n'
    "    }\n"
    "  ],\n"
    '  "factChecks": [\n'
    '    { "claim": "string", "sourceId": "string", "evidenceSnippet": "EXACT substring from source content (max 20 words)" }\n'
    "  ]\n"
    "}\n"
)


class RawScript(BaseModel):
    """Parsed writer output before citation validation."""
    cold_open: Optional[str] = None
    turns: List[DialogueTurn] = Field(default_factory=list)
    fact_checks: List[FactCheck] = Field(default_factory=list)


def word_target(duration_hint: str) -> int:
    try:
        return WORD_TARGETS[duration_hint]
    except KeyError:
        raise ValueError(f"Unknown duration hint: {duration_hint!r}") from None


def build_dialogue_prompt(topic: str, blueprint: Blueprint,
                          packed_sources: Sequence[PackedSource], duration_hint: str) -> str:
    blueprint_json = json.dumps(blueprint.to_payload(), ensure_ascii=False)
    return (
        "ROLE: Senior Podcast Dialogue Writer.\n"
        "TASK: Write the full dialogue script based on the Blueprint.\n\n"
        f"TOPIC: {topic}\n"
        f"BLUEPRINT: {blueprint_json}\n"
        f"SOURCES: {packed_sources_json(packed_sources)}\n"
        f"TARGET LENGTH: Approx {word_target(duration_hint)} words.\n\n"
        f"PERSONAS:\n{PERSONAS}\n"
        f"STRICT RULES:\n{STRICT_RULES}\n"
        f"OUTPUT JSON SCHEMA:\n{OUTPUT_SCHEMA}"
    )


def _entries(data: dict, *keys: str) -> list:
    for key in keys:
        value = data.get(key)
        if isinstance(value, list):
            return value
    return []


def _coerce_models(entries: list, model_cls, label: str) -> list:
    """Validate list entries into model_cls, skipping unusable ones."""
    parsed = []
    skipped = 0
    for entry in entries:
        if not isinstance(entry, dict):
            skipped += 1
            continue
        try:
            parsed.append(model_cls.model_validate(entry))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("  Skipped %d malformed %s entries", skipped, label)
    return parsed


def normalize_script(data: Any) -> RawScript:
    """Turn the writer's parsed JSON into a RawScript.

    Missing lists become empty; turns without text and fact checks without
    a sourceId are skipped. Odd side fields are coerced by the models.
    """
    if not isinstance(data, dict):
        raise MalformedResponse("Dialogue response is not a JSON object", reason=type(data).__name__)
    cold_open = data.get("coldOpen") or data.get("cold_open")
    return RawScript(
        cold_open=cold_open if isinstance(cold_open, str) else None,
        turns=_coerce_models(_entries(data, "turns"), DialogueTurn, "turn"),
        fact_checks=_coerce_models(_entries(data, "factChecks", "fact_checks"), FactCheck, "fact-check"),
    )


async def generate_dialogue_script(
    generator: TextGenerator,
    topic: str,
    blueprint: Blueprint,
    packed_sources: Sequence[PackedSource],
    duration_hint: str,
    *,
    model: str,
    repair_model: str,
) -> RawScript:
    """Request the script from the creative tier and parse it.

    JSON that cannot be recovered (locally or by one repair call on
    repair_model) raises MalformedResponse.
    """
    prompt = build_dialogue_prompt(topic, blueprint, packed_sources, duration_hint)
    completion = await generator.complete(model, prompt, response_format="json")
    data = await parse_with_model_repair(completion.text, generator, repair_model)
    script = normalize_script(data)
    logger.info("  Script: %d turns, %d fact checks", len(script.turns), len(script.fact_checks))
    return script
