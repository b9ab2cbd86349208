"""Tests for models.py: normalisation of model output and the persisted payload."""

import json

import pytest

from audio_overview.models import AudioOverviewDialogue, Blueprint, DialogueTurn, FactCheck, KeyClaim


class TestModels:

    def test_source_is_immutable(self, sample_sources):
        with pytest.raises(Exception):
            sample_sources[0].title = "changed"

    def test_pause_clamped(self):
        assert DialogueTurn(speaker="Nova", text="a", pause_ms_after=50).pause_ms_after == 150
        assert DialogueTurn(speaker="Nova", text="a", pause_ms_after=5000).pause_ms_after == 900
        assert DialogueTurn(speaker="Nova", text="a", pause_ms_after="oops").pause_ms_after == 400

    def test_speaker_normalized(self):
        assert DialogueTurn(speaker="nova ", text="a").speaker == "Nova"
        assert DialogueTurn(speaker="Narrator", text="a").speaker == "Atlas"

    def test_unusable_citations_dropped(self):
        turn = DialogueTurn.model_validate({
            "speaker": "Nova", "text": "a",
            "citations": [{"note": "no id"}, "s1", {"sourceId": 2}, 7],
        })
        assert [c.source_id for c in turn.citations] == ["s1", "2"]

    def test_fact_check_numeric_source_id(self):
        assert FactCheck.model_validate({"claim": "c", "sourceId": 3}).source_id == "3"

    def test_dialogue_payload_uses_camel_case(self):
        dialogue = AudioOverviewDialogue(title="t", topic="x", duration_hint="short",
                                         cold_open="Hook", turns=[DialogueTurn(speaker="Nova", text="hi")])
        payload = dialogue.to_payload()
        assert payload["durationHint"] == "short"
        assert payload["coldOpen"] == "Hook"
        assert payload["turns"][0]["pauseMsAfter"] == 400
        assert "audioUrl" not in payload
        assert set(payload["hosts"]) == {"nova", "atlas"}

    def test_with_audio_returns_copy(self):
        dialogue = AudioOverviewDialogue(title="t", topic="x", duration_hint="long")
        with_audio = dialogue.with_audio("data:audio/wav;base64,AA==")
        assert dialogue.audio_url is None
        assert with_audio.audio_url == "data:audio/wav;base64,AA=="
        assert with_audio.id == dialogue.id

    def test_payload_round_trips(self):
        dialogue = AudioOverviewDialogue(title="t", topic="x", duration_hint="medium")
        restored = AudioOverviewDialogue.model_validate_json(json.dumps(dialogue.to_payload()))
        assert restored == dialogue

    def test_transcript_text(self):
        dialogue = AudioOverviewDialogue(title="t", topic="x", duration_hint="short", turns=[
            DialogueTurn(speaker="Nova", text="hi"), DialogueTurn(speaker="Atlas", text="hey"),
        ])
        assert dialogue.transcript_text() == "Nova: hi\n\nAtlas: hey"


class TestLenientModelOutput:

    def test_blueprint_nulls_and_numbers(self):
        blueprint = Blueprint.model_validate({
            "angle": None,
            "structure": ["Intro", 2, None],
            "keyClaims": [
                {"claim": "x", "requiresSourceId": None},
                {"claim": "y", "requiresSourceId": 1},
                "bare claim",
                7,
            ],
            "controversialPoint": None,
        })
        assert blueprint.angle == ""
        assert blueprint.controversial_point == ""
        assert blueprint.structure == ["Intro", "2"]
        assert [(k.claim, k.requires_source_id) for k in blueprint.key_claims] == [
            ("x", ""), ("y", "1"), ("bare claim", ""),
        ]

    def test_blueprint_wrong_container_types(self):
        blueprint = Blueprint.model_validate({"structure": "Just one section", "keyClaims": None})
        assert blueprint.structure == ["Just one section"]
        assert blueprint.key_claims == []

    def test_key_claim_defaults(self):
        assert KeyClaim.model_validate({}) == KeyClaim(claim="", requires_source_id="")

    def test_non_string_note_kept_as_text(self):
        turn = DialogueTurn.model_validate({
            "speaker": "Nova", "text": "a", "citations": [{"sourceId": "s1", "note": 5}],
        })
        assert turn.citations[0].source_id == "s1"
        assert turn.citations[0].note == "5"

    def test_missing_speaker_is_atlas(self):
        assert DialogueTurn.model_validate({"text": "b"}).speaker == "Atlas"
        assert DialogueTurn.model_validate({"speaker": None, "text": "b"}).speaker == "Atlas"

    def test_numeric_text_kept(self):
        assert DialogueTurn.model_validate({"speaker": "Nova", "text": 42}).text == "42"

    def test_missing_text_is_unusable(self):
        with pytest.raises(Exception):
            DialogueTurn.model_validate({"speaker": "Nova", "text": None})

    def test_fact_check_null_fields(self):
        check = FactCheck.model_validate({"claim": None, "sourceId": "s1", "evidenceSnippet": None})
        assert (check.claim, check.source_id, check.evidence_snippet) == ("", "s1", "")

    def test_fact_check_without_source_is_unusable(self):
        with pytest.raises(Exception):
            FactCheck.model_validate({"claim": "c", "sourceId": None})
