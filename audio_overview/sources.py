"""Source packing for prompts, plus loading sources from local files."""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from audio_overview.config import SOURCE_EXCERPT_CHARS
from audio_overview.models import PackedSource, Source

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".md", ".markdown")


def pack_sources(sources: Sequence[Source], max_chars: int = SOURCE_EXCERPT_CHARS) -> List[PackedSource]:
    """Reduce sources to {id, title, contentExcerpt, type}, preserving order."""
    return [
        PackedSource(
            id=s.id,
            title=s.title,
            content_excerpt=s.content[:max_chars],
            type=s.type,
        )
        for s in sources
    ]


def packed_sources_json(packed: Sequence[PackedSource]) -> str:
    """Serialise packed sources for inclusion in a prompt."""
    return json.dumps([p.to_payload() for p in packed], ensure_ascii=False)


def format_context(sources: Sequence[Source], max_chars: int = 0) -> str:
    """Concatenate sources as SOURCE/CONTENT blocks, optionally truncated."""
    context = "\n".join(f"SOURCE: {s.title}\nCONTENT:\n{s.content}\n---" for s in sources)
    return context[:max_chars] if max_chars > 0 else context


def load_sources(paths: Iterable[Path]) -> List[Source]:
    """Build Source objects from text files or notebook-export JSON files.

    A JSON file may hold a list of source objects or an object with a
    "sources" list (camelCase or snake_case keys).
    """
    sources: List[Source] = []
    for path in paths:
        path = Path(path)
        if path.suffix.lower() == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
            entries = data.get("sources", []) if isinstance(data, dict) else data
            loaded = [Source.model_validate(entry) for entry in entries]
            logger.info("Loaded %d sources from %s", len(loaded), path.name)
            sources.extend(loaded)
        elif path.suffix.lower() in TEXT_SUFFIXES:
            sources.append(Source(
                id=path.stem,
                title=path.stem.replace("_", " ").replace("-", " "),
                content=path.read_text(encoding="utf-8"),
                type="file",
            ))
            logger.info("Loaded source file %s", path.name)
        else:
            logger.warning("Skipping %s: unsupported source type", path.name)
    return sources
