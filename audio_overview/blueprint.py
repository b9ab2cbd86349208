"""Blueprint stage: narrative angle, structure, key claims, one disagreement."""

import logging
from typing import Sequence

from pydantic import ValidationError

from audio_overview.clients import TextGenerator
from audio_overview.errors import MalformedResponse
from audio_overview.json_repair import parse_with_model_repair
from audio_overview.models import Blueprint, PackedSource
from audio_overview.sources import packed_sources_json

logger = logging.getLogger(__name__)


def build_blueprint_prompt(topic: str, packed_sources: Sequence[PackedSource]) -> str:
    return (
        "ROLE: Senior Content Strategist for a Podcast.\n"
        f"TASK: Create a blueprint for a 2-host conversation about: \"{topic}\".\n\n"
        f"SOURCES:\n{packed_sources_json(packed_sources)}\n\n"
        "GOAL:\n"
        "Identify the core narrative arc, key claims that need evidence, and potential gaps.\n\n"
        "OUTPUT JSON ONLY:\n"
        "{\n"
        '  "angle": "The unique angle/hook for this episode",\n'
        '  "structure": ["Introduction", "Point 1: ...", "Point 2: ...", "Conclusion"],\n'
        '  "keyClaims": [\n'
        '    { "claim": "string", "requiresSourceId": "id from sources" }\n'
        "  ],\n"
        '  "controversialPoint": "A specific point where hosts can have a friendly disagreement"\n'
        "}\n"
    )


async def generate_blueprint(
    generator: TextGenerator,
    topic: str,
    packed_sources: Sequence[PackedSource],
    *,
    model: str,
) -> Blueprint:
    """Request and parse the episode blueprint.

    No fallback: a response that cannot be recovered as JSON raises
    MalformedResponse and ends the run.
    """
    completion = await generator.complete(
        model, build_blueprint_prompt(topic, packed_sources), response_format="json"
    )
    data = await parse_with_model_repair(completion.text, generator, model)
    if not isinstance(data, dict):
        raise MalformedResponse("Blueprint response is not a JSON object", reason=type(data).__name__)
    try:
        blueprint = Blueprint.model_validate(data)
    except ValidationError as e:
        raise MalformedResponse("Blueprint response has an unexpected shape", reason=str(e)) from e

    if not blueprint.structure or not blueprint.angle:
        logger.warning("  Blueprint is incomplete (angle=%r, %d sections) -- passing it on as-is",
                       blueprint.angle[:40], len(blueprint.structure))
    logger.info("  Blueprint: %d sections, %d key claims",
                len(blueprint.structure), len(blueprint.key_claims))
    return blueprint
