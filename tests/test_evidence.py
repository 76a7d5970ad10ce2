"""Tests for the evidence gate."""

import logging

from cicada.citations import format_citation
from cicada.evidence import INFERENCE_MARKER, apply_evidence_gate, has_inference_marker

CITATION = format_citation(
    episode_id="onikakushi",
    episode_name="Onikakushi",
    chapter_id="ch1",
    message_id=1,
    text_eng="Uso da!",
)


def test_no_citations_prepends_marker():
    outcome = apply_evidence_gate([], "Perhaps Rena knows more.")
    assert outcome.has_direct_evidence is False
    assert outcome.text == f"{INFERENCE_MARKER}\n\nPerhaps Rena knows more."
    assert has_inference_marker(outcome.text)


def test_no_citations_existing_marker_not_duplicated():
    text = "[INFERENCE] The curse may be a disease."
    outcome = apply_evidence_gate([], text)
    assert outcome.text == text
    assert outcome.text.count("[INFERENCE") == 1


def test_no_citations_empty_text_still_marked():
    assert apply_evidence_gate([], "").text.startswith(INFERENCE_MARKER)


def test_citations_leave_text_untouched():
    outcome = apply_evidence_gate([CITATION], "Rena shouts at Keiichi.")
    assert outcome.has_direct_evidence is True
    assert outcome.text == "Rena shouts at Keiichi."
    assert outcome.marker_conflict is False
    assert not has_inference_marker(outcome.text)


def test_marker_with_citations_is_reported_not_stripped(caplog):
    text = f"{INFERENCE_MARKER}\n\nNothing found."
    with caplog.at_level(logging.ERROR, logger="cicada.evidence"):
        outcome = apply_evidence_gate([CITATION], text)

    assert outcome.marker_conflict is True
    assert outcome.has_direct_evidence is True
    assert outcome.text == text
    assert "inference marker" in caplog.text


def test_marker_detection_ignores_leading_whitespace():
    assert has_inference_marker("\n  [INFERENCE - guess]")
    assert not has_inference_marker("This is not an [INFERENCE")
