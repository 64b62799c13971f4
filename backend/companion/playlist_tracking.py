"""Progress math for a tracked playlist."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .youtube_client import PlaylistDetails


@dataclass(frozen=True)
class PlaylistProgress:
    completed_videos: int
    remaining_videos: int
    remaining_seconds: int
    percent_complete: int


def playlist_progress(details: PlaylistDetails, completed_count: int) -> PlaylistProgress:
    """Estimate remaining watch time, assuming videos share the total evenly."""
    total = details.total_videos
    if completed_count < 0 or completed_count > total:
        raise ValueError(f"completed_count must be between 0 and {total}, got {completed_count}.")
    if total == 0:
        return PlaylistProgress(completed_videos=0, remaining_videos=0, remaining_seconds=0, percent_complete=0)
    remaining = total - completed_count
    return PlaylistProgress(
        completed_videos=completed_count,
        remaining_videos=remaining,
        remaining_seconds=int(math.floor(remaining / total * details.total_duration_seconds + 0.5)),
        percent_complete=int(math.floor(completed_count / total * 100 + 0.5)),
    )


__all__ = ["PlaylistProgress", "playlist_progress"]
