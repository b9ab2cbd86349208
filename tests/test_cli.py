"""Tests for cli.py: argument parsing, run folders, and the run() flow with fake services."""

import asyncio
import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from audio_overview import cli
from audio_overview.config import Settings
from audio_overview.models import AudioOverviewDialogue, DialogueTurn

SETTINGS = Settings(fast_model="test-fast", creative_model="test-creative", tts_model="test-tts")


class _AsyncContext:
    """Wraps a fake service so it can stand in for a client class in `async with`."""

    def __init__(self, service):
        self.service = service

    def __call__(self, *args, **kwargs):
        return self

    async def __aenter__(self):
        return self.service

    async def __aexit__(self, *exc):
        return False


class TestParseArguments:

    def test_defaults(self):
        args = cli.parse_arguments(["--sources", "a.md", "b.txt"])
        assert args.sources == [Path("a.md"), Path("b.txt")]
        assert args.duration == "medium"
        assert args.topic is None
        assert args.synthesize is False
        assert args.output_dir == Path("audio_overview_outputs")

    def test_sources_and_dialogue_are_exclusive(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments(["--sources", "a.md", "--dialogue", "d.json"])

    def test_one_input_required(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments([])

    def test_rejects_unknown_duration(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments(["--sources", "a.md", "--duration", "epic"])


class TestOutputDir:

    def test_timestamped_dir_created(self, tmp_path):
        run_dir = cli.create_timestamped_output_dir(tmp_path / "runs")
        assert run_dir.is_dir()
        assert run_dir.parent == tmp_path / "runs"


class TestRun:

    def test_generate_from_sources(self, tmp_path, fake_generator_factory,
                                   sample_blueprint, script_factory):
        notes = tmp_path / "sleep_notes.md"
        notes.write_text("Sleep consolidates memory.", encoding="utf-8")
        generator = fake_generator_factory(["Sleep and Memory", sample_blueprint, script_factory()])
        args = cli.parse_arguments(["--sources", str(notes), "--duration", "short"])

        with patch.object(cli, "OpenAITextGenerator", _AsyncContext(generator)):
            dialogue = asyncio.run(cli.run(args, SETTINGS, tmp_path))

        assert dialogue.topic == "Sleep and Memory"
        assert [c["model"] for c in generator.calls] == ["test-fast", "test-fast", "test-creative"]
        # only sleep_notes exists, so every s1/s2/s9 citation is dropped
        assert all(t.citations == [] for t in dialogue.turns)
        saved = json.loads((tmp_path / cli.DIALOGUE_FILE).read_text(encoding="utf-8"))
        assert saved["id"] == dialogue.id
        assert "Nova: Line 0" in (tmp_path / cli.TRANSCRIPT_FILE).read_text(encoding="utf-8")

    def test_synthesize_existing_dialogue(self, tmp_path, fake_synthesizer):
        dialogue = AudioOverviewDialogue(
            title="Audio Overview: x", topic="x", duration_hint="short", cold_open="Hook",
            turns=[DialogueTurn(speaker="Nova", text="hi")],
        )
        path = tmp_path / "in.json"
        path.write_text(json.dumps(dialogue.to_payload()), encoding="utf-8")
        args = cli.parse_arguments(["--dialogue", str(path), "--synthesize"])

        with patch.object(cli, "GeminiSpeechSynthesizer", _AsyncContext(fake_synthesizer)):
            result = asyncio.run(cli.run(args, SETTINGS, tmp_path))

        wav = tmp_path / cli.AUDIO_FILE
        assert wav.read_bytes().startswith(b"RIFF")
        assert result.audio_url == wav.resolve().as_uri()
        assert result.id == dialogue.id
        assert fake_synthesizer.calls[0]["model"] == "test-tts"


class TestMain:

    def test_failure_returns_nonzero(self, tmp_path, fake_generator_factory):
        notes = tmp_path / "empty.png"
        notes.write_bytes(b"\x89PNG")
        generator = fake_generator_factory()
        argv = ["--sources", str(notes), "--topic", "x", "--output-dir", str(tmp_path / "runs")]
        try:
            with patch.object(cli, "OpenAITextGenerator", _AsyncContext(generator)):
                assert cli.main(argv) == 1
        finally:
            for handler in logging.getLogger().handlers[:]:
                handler.close()
                logging.getLogger().removeHandler(handler)
        assert generator.calls == []
