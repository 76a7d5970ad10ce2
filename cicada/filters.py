"""Candidate filtering by episode, character, chapter and metadata clauses."""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List

from .models import Passage, SearchOptions


@dataclass(frozen=True)
class EpisodeClause:
    episode_ids: FrozenSet[str]

    def matches(self, passage: Passage) -> bool:
        return passage.episode_id in self.episode_ids


@dataclass(frozen=True)
class CharacterClause:
    """Passage features the character as speaker or by mention in the text."""
    name: str

    def matches(self, passage: Passage) -> bool:
        needle = self.name.casefold()
        if passage.speaker and passage.speaker.casefold() == needle:
            return True
        return needle in (passage.text_eng or "").casefold()


@dataclass(frozen=True)
class ChapterClause:
    chapter_id: str

    def matches(self, passage: Passage) -> bool:
        return passage.chapter_id == self.chapter_id


@dataclass(frozen=True)
class MetadataClause:
    key: str
    value: str

    def matches(self, passage: Passage) -> bool:
        # A missing key never matches, even against an empty value
        return self.key in passage.metadata and passage.metadata[self.key] == self.value


def build_clauses(options: SearchOptions) -> List[object]:
    """Translate search options into the conjunctive list of clauses."""
    clauses: List[object] = []
    if options.episode_filter is not None:
        clauses.append(EpisodeClause(frozenset(options.episode_filter)))
    if options.character_filter:
        clauses.append(CharacterClause(options.character_filter))
    if options.chapter_filter:
        clauses.append(ChapterClause(options.chapter_filter))
    for key, value in (options.metadata_filters or {}).items():
        clauses.append(MetadataClause(key, value))
    return clauses


def filter_candidates(passages: Iterable[Passage], options: SearchOptions) -> List[Passage]:
    """
    Keep the passages satisfying every clause, in input order.

    With no clauses every passage passes.
    """
    clauses = build_clauses(options)
    if not clauses:
        return list(passages)
    return [p for p in passages if all(c.matches(p) for c in clauses)]
