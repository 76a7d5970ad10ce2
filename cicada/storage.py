"""Passage stores that hand already-embedded candidates to the engine."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .errors import InvalidPassageRecord
from .models import Passage

logger = logging.getLogger(__name__)


def _is_plain_name(part) -> bool:
    """True for a single path component that stays inside its parent directory."""
    return bool(part) and part not in (".", "..") and "/" not in part and "\\" not in part


class PassageStore(ABC):
    """Source of candidate passages for a search."""

    @abstractmethod
    def list_passages(self, episode_ids: Optional[Iterable[str]] = None) -> List[Passage]:
        """
        Return candidate passages, optionally limited to some episodes.

        The returned list is a fresh snapshot; callers may not assume any
        particular ordering beyond it being stable between calls.
        """

    def count_by_episode(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for passage in self.list_passages():
            counts[passage.episode_id] = counts.get(passage.episode_id, 0) + 1
        return counts


class InMemoryPassageStore(PassageStore):
    """Holds passages in insertion order. Used for tests and small corpora."""

    def __init__(self, passages: Optional[Iterable[Passage]] = None):
        self._passages: List[Passage] = list(passages or [])

    def add(self, passage: Passage) -> None:
        self._passages.append(passage)

    def list_passages(self, episode_ids: Optional[Iterable[str]] = None) -> List[Passage]:
        if episode_ids is None:
            return list(self._passages)
        wanted = set(episode_ids)
        return [p for p in self._passages if p.episode_id in wanted]

    def __len__(self) -> int:
        return len(self._passages)


class FilePassageStore(PassageStore):
    """
    Passages stored as JSON files under ``<root>/embeddings/<episode>/<chapter>/<id>.json``.

    Listing by episode only walks that episode's directory, which mirrors the
    prefix listing the ingestion bucket supports.
    """

    PREFIX = "embeddings"

    def __init__(self, root: str):
        self.root = Path(root)
        self.base = self.root / self.PREFIX

    def _path_for(self, passage: Passage) -> Path:
        for part in (passage.episode_id, passage.chapter_id, passage.id):
            if not _is_plain_name(part):
                raise InvalidPassageRecord(
                    f"Passage {passage.id!r} has a path component {part!r} that is not a plain name"
                )
        return self.base / passage.episode_id / passage.chapter_id / f"{passage.id}.json"

    def add(self, passage: Passage) -> Path:
        """Persist a single passage, overwriting any file with the same id."""
        path = self._path_for(passage)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(passage.to_dict(), f, ensure_ascii=False)
        logger.debug("Stored passage %s at %s", passage.id, path)
        return path

    def _load(self, path: Path) -> Optional[Passage]:
        """Read one passage file; unreadable records are logged and skipped."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                return Passage.from_dict(json.load(f))
        except (ValueError, InvalidPassageRecord) as e:
            logger.warning("Skipping unreadable passage file %s: %s", path, e)
            return None

    def _episode_dir(self, episode_id: str) -> Optional[Path]:
        """Directory holding an episode, or None when the id is not a plain name."""
        if not _is_plain_name(episode_id):
            logger.warning("Ignoring invalid episode id %r", episode_id)
            return None
        return self.base / episode_id

    def list_episodes(self) -> List[str]:
        if not self.base.exists():
            return []
        return sorted(p.name for p in self.base.iterdir() if p.is_dir())

    def list_passages(self, episode_ids: Optional[Iterable[str]] = None) -> List[Passage]:
        if not self.base.exists():
            return []

        wanted = sorted(set(episode_ids)) if episode_ids is not None else None
        if wanted is None:
            directories = [self.base]
        else:
            directories = [d for d in map(self._episode_dir, wanted) if d is not None]

        passages: List[Passage] = []
        for directory in directories:
            if not directory.is_dir():
                continue
            for path in sorted(directory.rglob("*.json")):
                passage = self._load(path)
                if passage is not None:
                    passages.append(passage)

        logger.info(
            "Loaded %d passages (episodes=%s)",
            len(passages),
            wanted if wanted is not None else "all",
        )
        return passages
