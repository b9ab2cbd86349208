"""
Command line entry point.

  python -m audio_overview --sources notes.md paper.txt --topic "Sleep and memory" --duration short
  python -m audio_overview --sources notebook.json --synthesize
  python -m audio_overview --dialogue runs/2026-01-01_10-00-00/dialogue.json --synthesize
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from audio_overview.clients import GeminiSpeechSynthesizer, OpenAITextGenerator
from audio_overview.config import Settings
from audio_overview.errors import AudioOverviewError
from audio_overview.models import AudioOverviewDialogue
from audio_overview.pipeline import generate_audio_overview_dialogue, infer_topic
from audio_overview.sources import load_sources
from audio_overview.synthesis import synthesize_dialogue_audio

logger = logging.getLogger(__name__)

DIALOGUE_FILE = "dialogue.json"
TRANSCRIPT_FILE = "transcript.txt"
AUDIO_FILE = "overview.wav"
LOG_FILE = "audio_overview.log"


def setup_logging(output_dir: Path):
    """Log to the run directory and to stdout."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(output_dir / LOG_FILE),
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )


def create_timestamped_output_dir(base_dir: Path) -> Path:
    """Create base_dir/YYYY-MM-DD_HH-MM-SS/ for this run."""
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    timestamped_dir = base_dir / timestamp
    timestamped_dir.mkdir(parents=True, exist_ok=True)
    return timestamped_dir


def parse_arguments(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description='Generate a two-host audio overview script (and audio) from notebook sources.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables:
  GEMINI_API_KEY / LLM_API_KEY   key for the generation service
  FAST_MODEL_NAME, CREATIVE_MODEL_NAME, TTS_MODEL_NAME   model tiers
        """
    )
    source_group = parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument(
        '--sources',
        nargs='+',
        type=Path,
        help='Source files (.txt, .md) or a notebook export (.json)'
    )
    source_group.add_argument(
        '--dialogue',
        type=Path,
        help='Existing dialogue.json to synthesize (skips script generation)'
    )
    parser.add_argument(
        '--topic',
        type=str,
        help='Episode topic (inferred from the sources when omitted)'
    )
    parser.add_argument(
        '--duration',
        choices=['short', 'medium', 'long'],
        default='medium',
        help='Target length: short (~600 words), medium (~1200), long (~1800)'
    )
    parser.add_argument(
        '--synthesize',
        action='store_true',
        help='Also synthesize the dialogue to WAV audio'
    )
    parser.add_argument(
        '--output-dir',
        type=Path,
        default=Path('audio_overview_outputs'),
        help='Base directory for timestamped run folders'
    )
    return parser.parse_args(argv)


def write_dialogue(dialogue: AudioOverviewDialogue, run_dir: Path) -> Path:
    path = run_dir / DIALOGUE_FILE
    path.write_text(json.dumps(dialogue.to_payload(), indent=2, ensure_ascii=False), encoding="utf-8")
    (run_dir / TRANSCRIPT_FILE).write_text(
        f"{dialogue.title}\n\n{dialogue.cold_open}\n\n{dialogue.transcript_text()}\n", encoding="utf-8"
    )
    logger.info("Dialogue saved: %s", path)
    return path


async def run(args, settings: Settings, run_dir: Path) -> AudioOverviewDialogue:
    if args.dialogue:
        dialogue = AudioOverviewDialogue.model_validate_json(args.dialogue.read_text(encoding="utf-8"))
    else:
        sources = load_sources(args.sources)
        async with OpenAITextGenerator(settings) as generator:
            topic = args.topic or await infer_topic(generator, sources, model=settings.fast_model)
            dialogue = await generate_audio_overview_dialogue(
                sources, topic, args.duration,
                generator=generator,
                on_progress=lambda msg: print(f"  -> {msg}"),
                settings=settings,
            )
        write_dialogue(dialogue, run_dir)

    if args.synthesize:
        async with GeminiSpeechSynthesizer(settings) as synthesizer:
            resource = await synthesize_dialogue_audio(
                dialogue, synthesizer=synthesizer, model=settings.tts_model
            )
        wav_path = resource.save(run_dir / AUDIO_FILE)
        dialogue = dialogue.with_audio(wav_path.resolve().as_uri())
        write_dialogue(dialogue, run_dir)
    return dialogue


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    run_dir = create_timestamped_output_dir(args.output_dir)
    setup_logging(run_dir)
    logger.info(f"{'='*60}")
    logger.info(f"OUTPUT DIRECTORY: {run_dir}")
    logger.info(f"{'='*60}")

    try:
        dialogue = asyncio.run(run(args, Settings.from_env(), run_dir))
    except AudioOverviewError as e:
        logger.error("Audio overview failed: %s", e)
        return 1

    for warning in dialogue.warnings:
        logger.warning("  %s", warning)
    logger.info("Done: %s (%d turns)", dialogue.title, len(dialogue.turns))
    return 0


if __name__ == "__main__":
    sys.exit(main())
