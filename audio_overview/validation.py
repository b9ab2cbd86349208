"""
Citation / fact-check validation and dialogue assembly.

validate_citations() is the grounding guarantee: after it runs, no turn
citation and no fact check refers to a source id the notebook does not
have. Unknown references are dropped, never repaired or substituted.
"""

import logging
from typing import AbstractSet, List, Optional, Sequence, Tuple

from audio_overview.models import (
    HOSTS,
    AudioOverviewDialogue,
    DialogueTurn,
    FactCheck,
)

logger = logging.getLogger(__name__)

MIN_TURNS = 5
LOW_TURN_WARNING = "Script generation resulted in very few turns."
DEFAULT_COLD_OPEN = "Let's dive in."


def validate_citations(
    raw_turns: Sequence[DialogueTurn],
    fact_checks: Sequence[FactCheck],
    known_source_ids: AbstractSet[str],
) -> Tuple[List[DialogueTurn], List[FactCheck]]:
    """Keep only citations and fact checks whose sourceId is known."""
    validated_turns = []
    dropped_citations = 0
    for turn in raw_turns:
        kept = [c for c in turn.citations if c.source_id in known_source_ids]
        dropped_citations += len(turn.citations) - len(kept)
        validated_turns.append(turn.model_copy(update={"citations": kept}))

    validated_checks = [fc for fc in fact_checks if fc.source_id in known_source_ids]

    logger.debug("  Validation dropped %d citations and %d fact checks",
                 dropped_citations, len(fact_checks) - len(validated_checks))
    return validated_turns, validated_checks


def assemble_dialogue(
    topic: str,
    duration_hint: str,
    cold_open: Optional[str],
    turns: Sequence[DialogueTurn],
    fact_checks: Sequence[FactCheck],
) -> AudioOverviewDialogue:
    """Build the persisted dialogue record from validated parts."""
    warnings = [LOW_TURN_WARNING] if len(turns) < MIN_TURNS else []
    if warnings:
        logger.warning("  Only %d turns after validation (minimum %d)", len(turns), MIN_TURNS)
    return AudioOverviewDialogue(
        title=f"Audio Overview: {topic}",
        topic=topic,
        duration_hint=duration_hint,
        hosts=dict(HOSTS),
        cold_open=cold_open or DEFAULT_COLD_OPEN,
        turns=list(turns),
        fact_checks=list(fact_checks),
        warnings=warnings,
    )
