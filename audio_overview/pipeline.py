"""
Audio overview generation pipeline.

Sources -> pack -> blueprint -> dialogue -> validate -> assemble.

Stages run strictly one after another; each service call is an await
point. Nothing here serialises concurrent runs for the same notebook, and
the caller writes the returned dialogue back into its artifact collection.
"""

import logging
from typing import Optional, Sequence

from audio_overview.blueprint import generate_blueprint
from audio_overview.clients import TextGenerator
from audio_overview.config import Settings, TOPIC_CONTEXT_CHARS
from audio_overview.dialogue import generate_dialogue_script, word_target
from audio_overview.errors import NoSources
from audio_overview.models import AudioOverviewDialogue, Source
from audio_overview.progress import ProgressCallback, ProgressEmitter, Stage
from audio_overview.sources import format_context, pack_sources
from audio_overview.validation import assemble_dialogue, validate_citations

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "Research Topic"


async def generate_audio_overview_dialogue(
    sources: Sequence[Source],
    topic: str,
    duration_hint: str,
    *,
    generator: TextGenerator,
    on_progress: Optional[ProgressCallback] = None,
    progress: Optional[ProgressEmitter] = None,
    settings: Optional[Settings] = None,
) -> AudioOverviewDialogue:
    """Generate a validated two-host dialogue for topic from sources.

    Raises NoSources before any service call when sources is empty;
    MalformedResponse / GenerationFailed from either generation stage end
    the run. A short script is reported in the dialogue's warnings.

    on_progress subscribes to a fresh emitter; pass progress instead to
    reuse an emitter across runs. Passing both raises ValueError.
    """
    if not sources:
        raise NoSources()
    word_target(duration_hint)  # unknown hints fail before any service call

    settings = settings or Settings()
    if progress is None:
        progress = ProgressEmitter(on_progress)
    elif on_progress is not None:
        raise ValueError("Pass either on_progress or progress, not both")

    logger.info("=" * 60)
    logger.info("AUDIO OVERVIEW: %s (%s, %d sources)", topic, duration_hint, len(sources))
    logger.info("=" * 60)

    packed = pack_sources(sources)

    progress.emit(Stage.BLUEPRINT)
    blueprint = await generate_blueprint(generator, topic, packed, model=settings.fast_model)

    progress.emit(Stage.DIALOGUE)
    script = await generate_dialogue_script(
        generator, topic, blueprint, packed, duration_hint,
        model=settings.creative_model,
        repair_model=settings.fast_model,
    )

    progress.emit(Stage.VALIDATION)
    known_ids = {s.id for s in sources}
    turns, fact_checks = validate_citations(script.turns, script.fact_checks, known_ids)

    dialogue = assemble_dialogue(topic, duration_hint, script.cold_open, turns, fact_checks)
    logger.info("  Dialogue %s: %d turns, %d fact checks, %d warnings",
                dialogue.id, len(dialogue.turns), len(dialogue.fact_checks), len(dialogue.warnings))
    return dialogue


async def infer_topic(generator: TextGenerator, sources: Sequence[Source], *, model: str) -> str:
    """Ask the fast tier for the main topic of the sources (5 words or less)."""
    if not sources:
        raise NoSources()
    context = format_context(sources, max_chars=TOPIC_CONTEXT_CHARS)
    prompt = (
        "Based on the following sources, identify the main topic in 5 words or less:\n\n"
        f"{context}"
    )
    completion = await generator.complete(model, prompt)
    topic = completion.text.strip().strip('"').strip()
    return topic or DEFAULT_TOPIC
