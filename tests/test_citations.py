"""Tests for citation formatting."""

import pytest

from cicada.citations import (
    NO_RESULTS_TEXT,
    citation_for,
    format_citation,
    format_search_results,
)
from cicada.errors import IncompleteCitation
from cicada.models import Citation, ScoredResult

from tests.conftest import make_passage

COMPLETE = dict(
    episode_id="onikakushi",
    episode_name="Onikakushi",
    chapter_id="ch1",
    message_id=42,
    text_eng="  Hau~ omochikaeri!  ",
    speaker="Rena",
    text_jpn="はう～お持ち帰り！",
)


def test_complete_input_copied_verbatim():
    citation = format_citation(**COMPLETE)
    for name, value in COMPLETE.items():
        assert getattr(citation, name) == value


def test_optional_fields_may_be_absent():
    fields = dict(COMPLETE, speaker=None, text_jpn=None)
    citation = format_citation(**fields)
    assert citation.speaker is None
    assert citation.text_jpn is None


def test_message_id_zero_is_valid():
    assert format_citation(**dict(COMPLETE, message_id=0)).message_id == 0


def test_missing_text_eng_is_named():
    fields = dict(COMPLETE)
    del fields["text_eng"]
    with pytest.raises(IncompleteCitation) as exc_info:
        format_citation(**fields)
    assert exc_info.value.missing_fields == ("text_eng",)
    assert "text_eng" in str(exc_info.value)


@pytest.mark.parametrize("field,value", [
    ("episode_id", ""),
    ("episode_name", None),
    ("chapter_id", ""),
    ("message_id", None),
    ("message_id", True),
    ("message_id", "12"),
    ("text_eng", ""),
])
def test_invalid_required_field_rejected(field, value):
    with pytest.raises(IncompleteCitation) as exc_info:
        format_citation(**dict(COMPLETE, **{field: value}))
    assert exc_info.value.missing_fields == (field,)


def test_every_missing_field_is_reported():
    with pytest.raises(IncompleteCitation) as exc_info:
        format_citation(episode_id="onikakushi")
    assert set(exc_info.value.missing_fields) == {
        "episode_name", "chapter_id", "message_id", "text_eng",
    }


def test_citation_constructor_enforces_required_fields():
    with pytest.raises(IncompleteCitation) as exc_info:
        Citation(episode_id="", episode_name="", chapter_id="", message_id=None, text_eng="")
    assert exc_info.value.missing_fields == (
        "episode_id", "episode_name", "chapter_id", "message_id", "text_eng",
    )


def test_citation_constructor_accepts_complete_fields():
    citation = Citation(**COMPLETE)
    assert citation == format_citation(**COMPLETE)


def test_citation_for_uses_episode_name_metadata():
    passage = make_passage("p", episode_id="tatarigoroshi", metadata={"episodeName": "Tatarigoroshi"})
    citation = citation_for(ScoredResult(passage, 0.8))
    assert citation.episode_name == "Tatarigoroshi"
    assert citation.message_id == passage.message_id


def test_citation_for_falls_back_to_episode_id():
    passage = make_passage("p", episode_id="himatsubushi", metadata={})
    assert citation_for(ScoredResult(passage, 0.8)).episode_name == "himatsubushi"


def test_to_dict_uses_external_keys():
    data = format_citation(**COMPLETE).to_dict()
    assert data["episodeId"] == "onikakushi"
    assert data["textENG"] == COMPLETE["text_eng"]
    assert data["textJPN"] == COMPLETE["text_jpn"]
    assert data["messageId"] == 42


def test_format_search_results_block():
    passage = make_passage("p", episode_id="onikakushi", chapter_id="ch2", message_id=7,
                           speaker=None, text_eng="Silence.", text_jpn="静寂。")
    text = format_search_results([ScoredResult(passage, 0.8766)])
    assert text.startswith("[Result 1] (Relevance: 87.7%)")
    assert "Citation: onikakushi/ch2/7" in text
    assert "Speaker: Narrator" in text
    assert "English: Silence." in text


def test_format_search_results_empty():
    assert format_search_results([]) == NO_RESULTS_TEXT
