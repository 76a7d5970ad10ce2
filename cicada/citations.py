"""Citation validation and rendering."""

from typing import List, Optional, Sequence

from .models import Citation, ScoredResult

# Metadata key written at ingestion time with the human-readable episode title
EPISODE_NAME_KEY = "episodeName"

NO_RESULTS_TEXT = "No relevant script passages found."


def format_citation(
    *,
    episode_id: Optional[str] = None,
    episode_name: Optional[str] = None,
    chapter_id: Optional[str] = None,
    message_id: Optional[int] = None,
    text_eng: Optional[str] = None,
    speaker: Optional[str] = None,
    text_jpn: Optional[str] = None,
) -> Citation:
    """
    Validate a citation field set and return it as a Citation.

    Required fields are copied verbatim; nothing is trimmed or rewritten.
    ``message_id`` may be zero but must be an integer. Validation itself
    lives on ``Citation``, so a citation built directly is held to the
    same rules.

    Raises:
        IncompleteCitation: naming every missing or empty required field
    """
    return Citation(
        episode_id=episode_id,
        episode_name=episode_name,
        chapter_id=chapter_id,
        message_id=message_id,
        text_eng=text_eng,
        speaker=speaker,
        text_jpn=text_jpn,
    )


def citation_for(result: ScoredResult) -> Citation:
    """Cite a ranked result, falling back to the episode id for its name."""
    passage = result.passage
    return format_citation(
        episode_id=passage.episode_id,
        episode_name=passage.metadata.get(EPISODE_NAME_KEY) or passage.episode_id,
        chapter_id=passage.chapter_id,
        message_id=passage.message_id,
        text_eng=passage.text_eng,
        speaker=passage.speaker,
        text_jpn=passage.text_jpn,
    )


def format_search_results(results: Sequence[ScoredResult]) -> str:
    """Render ranked results as the numbered passage block handed to agents."""
    if not results:
        return NO_RESULTS_TEXT

    blocks: List[str] = []
    for index, result in enumerate(results, 1):
        passage = result.passage
        blocks.append(
            f"[Result {index}] (Relevance: {result.score * 100:.1f}%)\n"
            f"Citation: {result.ref}\n"
            f"Speaker: {passage.speaker or 'Narrator'}\n"
            f"Japanese: {passage.text_jpn or ''}\n"
            f"English: {passage.text_eng}"
        )
    return "\n---\n".join(blocks)
