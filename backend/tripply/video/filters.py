"""Video filtering - destination matching, deduplication and rank parsing."""

import re
from collections.abc import Iterable, Sequence

from backend.tripply.models.video import VideoResult


def filter_by_city(videos: Sequence[VideoResult], city: str) -> list[VideoResult]:
    """Keep videos whose title or description mentions the city (case-insensitive).

    An empty city keeps everything.
    """
    needle = city.strip().lower()
    if not needle:
        return list(videos)
    return [v for v in videos if needle in f"{v.title} {v.description}".lower()]


def dedupe_videos(batches: Iterable[Sequence[VideoResult]]) -> list[VideoResult]:
    """Merge result batches, keeping the first occurrence of each video id."""
    seen: set[str] = set()
    merged: list[VideoResult] = []
    for batch in batches:
        for video in batch:
            if video.video_id not in seen:
                seen.add(video.video_id)
                merged.append(video)
    return merged


def parse_ranked_indices(text: str, count: int) -> list[int]:
    """Distinct in-range indices from a "2,5,1" style answer, in answer order."""
    indices: list[int] = []
    for token in re.findall(r"\d+", text):
        index = int(token)
        if index < count and index not in indices:
            indices.append(index)
    return indices


def apply_ranking(
    videos: Sequence[VideoResult], indices: Sequence[int], limit: int
) -> list[VideoResult]:
    """Videos in ranked order, padded with unranked ones in original order."""
    ranked = [videos[i] for i in indices]
    if len(ranked) < limit:
        used = set(indices)
        ranked.extend(v for i, v in enumerate(videos) if i not in used)
    return ranked[:limit]
