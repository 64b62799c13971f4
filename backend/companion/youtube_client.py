"""YouTube Data API client used to collect playlist videos and durations."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from .duration_codec import parse_duration
from .watch_scheduler import TimedItem

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"
PAGE_SIZE = 50
VIDEO_BATCH_SIZE = 50
DEFAULT_PLAYLIST_TITLE = "Untitled Playlist"

_PLAYLIST_PATTERNS = (
    re.compile(r"[?&]list=([^#&?]+)"),
    re.compile(r"youtu\.be/.*[?&]list=([^#&?]+)"),
    re.compile(r"youtube\.com/playlist\?list=([^#&?]+)"),
)


class YouTubeAPIError(RuntimeError):
    """Raised when playlist metadata cannot be fetched."""


class PlaylistVideo(BaseModel):
    id: str
    title: str
    duration: str = Field(default="", description="Broadcast duration token, e.g. PT2M30S.")

    @property
    def duration_seconds(self) -> int:
        return parse_duration(self.duration)

    def to_timed_item(self) -> TimedItem:
        return TimedItem(id=self.id, title=self.title, duration_seconds=self.duration_seconds)


class PlaylistDetails(BaseModel):
    playlist_id: str
    title: str
    total_videos: int
    total_duration_seconds: int
    videos: List[PlaylistVideo] = Field(default_factory=list)


def extract_playlist_id(url: str) -> Optional[str]:
    for pattern in _PLAYLIST_PATTERNS:
        match = pattern.search(url or "")
        if match:
            return match.group(1)
    return None


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return None


class YouTubeClient:
    """Thin synchronous wrapper over the playlists/playlistItems/videos endpoints."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = YOUTUBE_API_BASE_URL,
        client: Optional[httpx.Client] = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        if not api_key:
            raise YouTubeAPIError("YouTube API key is not configured.")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._owns_client = client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "YouTubeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get(self, resource: str, params: Dict[str, Any]) -> Dict[str, Any]:
        query = {key: value for key, value in params.items() if value is not None}
        query["key"] = self._api_key
        try:
            response = self._client.get(f"{self._base_url}/{resource}", params=query)
        except httpx.HTTPError as exc:
            raise YouTubeAPIError("Failed to fetch playlist details") from exc
        if response.is_error:
            message = _error_message(response) or "Failed to fetch playlist details"
            logger.warning("YouTube %s request failed (%s): %s", resource, response.status_code, message)
            raise YouTubeAPIError(message)
        try:
            payload = response.json()
        except ValueError as exc:
            raise YouTubeAPIError("Failed to fetch playlist details") from exc
        if not isinstance(payload, dict):
            raise YouTubeAPIError("Failed to fetch playlist details")
        return payload

    def fetch_playlist_title(self, playlist_id: str) -> str:
        payload = self._get("playlists", {"part": "snippet", "id": playlist_id})
        items = payload.get("items") or []
        if not items:
            return DEFAULT_PLAYLIST_TITLE
        snippet = items[0].get("snippet") or {}
        return snippet.get("title") or DEFAULT_PLAYLIST_TITLE

    def fetch_playlist_video_ids(self, playlist_id: str) -> List[str]:
        video_ids: List[str] = []
        page_token: Optional[str] = None
        while True:
            payload = self._get(
                "playlistItems",
                {
                    "part": "snippet,contentDetails",
                    "playlistId": playlist_id,
                    "maxResults": PAGE_SIZE,
                    "pageToken": page_token,
                },
            )
            for item in payload.get("items") or []:
                video_id = (item.get("contentDetails") or {}).get("videoId")
                if video_id:
                    video_ids.append(video_id)
            page_token = payload.get("nextPageToken")
            if not page_token:
                return video_ids

    def fetch_videos(self, video_ids: List[str]) -> List[PlaylistVideo]:
        """Fetch video details in batches, keeping the order of ``video_ids``."""
        found: Dict[str, PlaylistVideo] = {}
        for start in range(0, len(video_ids), VIDEO_BATCH_SIZE):
            batch = video_ids[start : start + VIDEO_BATCH_SIZE]
            payload = self._get("videos", {"part": "contentDetails,snippet", "id": ",".join(batch)})
            for item in payload.get("items") or []:
                video_id = item.get("id")
                if not video_id:
                    continue
                found[video_id] = PlaylistVideo(
                    id=video_id,
                    title=(item.get("snippet") or {}).get("title") or "",
                    duration=(item.get("contentDetails") or {}).get("duration") or "",
                )
        missing = [video_id for video_id in video_ids if video_id not in found]
        if missing:
            # Private and deleted entries have no video resource.
            logger.info("Skipping %d unavailable playlist videos", len(missing))
        return [found[video_id] for video_id in video_ids if video_id in found]

    def fetch_playlist(self, playlist_id: str) -> PlaylistDetails:
        title = self.fetch_playlist_title(playlist_id)
        videos = self.fetch_videos(self.fetch_playlist_video_ids(playlist_id))
        return PlaylistDetails(
            playlist_id=playlist_id,
            title=title,
            total_videos=len(videos),
            total_duration_seconds=sum(video.duration_seconds for video in videos),
            videos=videos,
        )


__all__ = [
    "PlaylistDetails",
    "PlaylistVideo",
    "YouTubeAPIError",
    "YouTubeClient",
    "extract_playlist_id",
]
