"""Shared fixtures and test doubles."""

from typing import Dict, List, Optional

import pytest

from cicada.embeddings import BaseEmbeddingProvider
from cicada.engine import AnswerGenerator, Cicada
from cicada.config import CicadaConfig
from cicada.models import Passage
from cicada.storage import InMemoryPassageStore

QUERY = [1.0, 0.0, 0.0, 0.0]
ORTHOGONAL = [0.0, 1.0, 0.0, 0.0]


def make_passage(
    pid: str,
    embedding=None,
    *,
    episode_id: str = "onikakushi",
    chapter_id: str = "ch1",
    message_id: int = 1,
    text_eng: str = "The cicadas are crying.",
    speaker: Optional[str] = None,
    text_jpn: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None,
) -> Passage:
    return Passage(
        id=pid,
        episode_id=episode_id,
        chapter_id=chapter_id,
        message_id=message_id,
        text_eng=text_eng,
        embedding=tuple(embedding if embedding is not None else QUERY),
        speaker=speaker,
        text_jpn=text_jpn,
        metadata=metadata if metadata is not None else {"episodeName": "Onikakushi"},
    )


class FakeEmbedder(BaseEmbeddingProvider):
    """Returns a fixed vector per text, or a default vector."""

    name = "fake"

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, default=None, error=None):
        super().__init__("fake-model")
        self.vectors = vectors or {}
        self.default = list(default if default is not None else QUERY)
        self.error = error
        self.calls: List[List[str]] = []

    @property
    def dimension(self) -> int:
        return len(self.default)

    def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return [list(self.vectors.get(t, self.default)) for t in texts]


class StaticGenerator(AnswerGenerator):
    def __init__(self, text: str):
        self.text = text
        self.received = None

    def generate(self, query, citations, groups):
        self.received = (query, list(citations), groups)
        return self.text


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def corpus():
    return [
        make_passage("p1", QUERY, episode_id="onikakushi", chapter_id="ch1", message_id=10,
                     speaker="Rena", text_eng="I'll take you home!"),
        make_passage("p2", ORTHOGONAL, episode_id="watanagashi", chapter_id="ch2", message_id=11,
                     speaker="Mion", text_eng="Uncle Ooishi is looking for Rena.",
                     metadata={"episodeName": "Watanagashi", "arc": "question"}),
        make_passage("p3", [0.9, 0.1, 0.0, 0.0], episode_id="onikakushi", chapter_id="ch3",
                     message_id=0, speaker=None, text_eng="Keiichi walks to school.",
                     metadata={"episodeName": "Onikakushi", "arc": "question"}),
    ]


@pytest.fixture
def engine(embedder, corpus):
    return Cicada(
        CicadaConfig(default_top_k=5, default_min_score=0.5),
        embedder=embedder,
        store=InMemoryPassageStore(corpus),
    )
