"""Group ranked results by episode."""

from typing import Iterable

from .models import EpisodeGroups, ScoredResult


def group_by_episode(results: Iterable[ScoredResult]) -> EpisodeGroups:
    """Partition results by episode id, keeping first-seen episode order and rank order within each group."""
    grouped: EpisodeGroups = {}
    for result in results:
        grouped.setdefault(result.episode_id, []).append(result)
    return grouped
