"""Data models for the CICADA retrieval engine."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import IncompleteCitation, InvalidPassageRecord, InvalidSearchOptions

DEFAULT_TOP_K = 10
DEFAULT_MIN_SCORE = 0.7


def _is_blank(value) -> bool:
    return not isinstance(value, str) or not value


@dataclass(frozen=True)
class Passage:
    """The smallest retrievable unit of script text, with its embedding."""
    id: str
    episode_id: str
    chapter_id: str
    message_id: int
    text_eng: str
    embedding: Sequence[float]
    speaker: Optional[str] = None
    text_jpn: Optional[str] = None
    metadata: Mapping[str, str] = field(default_factory=dict)

    @property
    def ref(self) -> str:
        return f"{self.episode_id}/{self.chapter_id}/{self.message_id}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Passage":
        """
        Build a passage from the stored JSON shape (camelCase keys).

        Raises:
            InvalidPassageRecord: if the record has no id or its embedding
                or metadata cannot be read
        """
        try:
            return cls(
                id=str(data["id"]),
                episode_id=data.get("episodeId", ""),
                chapter_id=data.get("chapterId", ""),
                message_id=data.get("messageId"),
                text_eng=data.get("textENG", ""),
                embedding=tuple(float(x) for x in data.get("embedding") or ()),
                speaker=data.get("speaker") or None,
                text_jpn=data.get("textJPN") or None,
                metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise InvalidPassageRecord(f"Malformed passage record: {exc!r}") from exc

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "episodeId": self.episode_id,
            "chapterId": self.chapter_id,
            "messageId": self.message_id,
            "textENG": self.text_eng,
            "embedding": list(self.embedding),
            "metadata": dict(self.metadata),
        }
        if self.speaker is not None:
            data["speaker"] = self.speaker
        if self.text_jpn is not None:
            data["textJPN"] = self.text_jpn
        return data


@dataclass
class SearchOptions:
    """Ranking limits and filter clauses for a single search."""
    top_k: int = DEFAULT_TOP_K
    min_score: float = DEFAULT_MIN_SCORE
    episode_filter: Optional[FrozenSet[str]] = None
    character_filter: Optional[str] = None
    chapter_filter: Optional[str] = None
    metadata_filters: Optional[Dict[str, str]] = None

    def __post_init__(self):
        if isinstance(self.top_k, bool) or not isinstance(self.top_k, int) or self.top_k < 0:
            raise InvalidSearchOptions(f"top_k must be a non-negative integer, got {self.top_k!r}")
        try:
            min_score = float(self.min_score)
        except (TypeError, ValueError):
            raise InvalidSearchOptions(f"min_score must be a number, got {self.min_score!r}") from None
        if not -1.0 <= min_score <= 1.0:
            raise InvalidSearchOptions(f"min_score must be within [-1, 1], got {self.min_score!r}")
        self.min_score = min_score
        if self.episode_filter is not None:
            # A bare string would otherwise become a set of its characters
            if isinstance(self.episode_filter, str):
                raise InvalidSearchOptions(
                    f"episode filter must be a collection of ids, got the string {self.episode_filter!r}"
                )
            self.episode_filter = frozenset(self.episode_filter)

    @classmethod
    def build(
        cls,
        *,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        episode_ids: Optional[Iterable[str]] = None,
        character: Optional[str] = None,
        chapter_id: Optional[str] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> "SearchOptions":
        """Keyword-friendly constructor used by the API and CLI layers."""
        return cls(
            top_k=top_k,
            min_score=min_score,
            episode_filter=episode_ids,
            character_filter=character or None,
            chapter_filter=chapter_id or None,
            metadata_filters=dict(metadata) if metadata else None,
        )


@dataclass(frozen=True)
class ScoredResult:
    """A passage paired with its similarity to the query."""
    passage: Passage
    score: float

    @property
    def episode_id(self) -> str:
        return self.passage.episode_id

    @property
    def ref(self) -> str:
        return self.passage.ref


@dataclass(frozen=True)
class Citation:
    """Validated attribution record for a cited passage."""
    episode_id: str
    episode_name: str
    chapter_id: str
    message_id: int
    text_eng: str
    speaker: Optional[str] = None
    text_jpn: Optional[str] = None

    def __post_init__(self):
        missing = [
            name
            for name in ("episode_id", "episode_name", "chapter_id")
            if _is_blank(getattr(self, name))
        ]
        # bool is an int subclass; 0 is a valid message id
        if isinstance(self.message_id, bool) or not isinstance(self.message_id, int):
            missing.append("message_id")
        if _is_blank(self.text_eng):
            missing.append("text_eng")
        if missing:
            raise IncompleteCitation(missing)

    def to_dict(self) -> Dict[str, Any]:
        """External camelCase shape consumed by agents and clients."""
        return {
            "episodeId": self.episode_id,
            "episodeName": self.episode_name,
            "chapterId": self.chapter_id,
            "messageId": self.message_id,
            "speaker": self.speaker,
            "textENG": self.text_eng,
            "textJPN": self.text_jpn,
        }


EpisodeGroups = Dict[str, List[ScoredResult]]


@dataclass
class RejectedResult:
    """A ranked result dropped because it could not be cited."""
    result: ScoredResult
    missing_fields: Tuple[str, ...]


@dataclass
class SearchResponse:
    """Outcome of one search: ranked results, their citations and the evidence flag."""
    results: List[ScoredResult]
    citations: List[Citation]
    has_direct_evidence: bool
    groups: Optional[EpisodeGroups] = None
    rejected: List[RejectedResult] = field(default_factory=list)


@dataclass
class Answer:
    """Generated answer text after the evidence gate has been applied."""
    content: str
    citations: List[Citation]
    has_direct_evidence: bool
    marker_conflict: bool = False
