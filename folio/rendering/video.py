"""Resolve video item URLs to an embeddable player on a supported platform."""

import re
from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlencode

from folio.document.models import VideoItem

Platform = Literal["youtube", "bilibili"]

YOUTUBE_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
)
BILIBILI_BV_PATTERN = re.compile(r"/video/(BV[a-zA-Z0-9]+)", re.IGNORECASE)
BILIBILI_AV_PATTERN = re.compile(r"/video/av(\d+)", re.IGNORECASE)

_ASPECT_PADDING = {"16:9": "56.25%", "4:3": "75%", "1:1": "100%"}


@dataclass(frozen=True)
class BilibiliId:
    bvid: str | None = None
    aid: str | None = None


@dataclass(frozen=True)
class VideoEmbed:
    """A resolved player for one video item."""

    platform: Platform
    src: str
    title: str


def detect_platform(url: str) -> Platform | None:
    """Guess the hosting platform from the URL's domain."""
    lowered = url.strip().lower()
    if "youtube.com" in lowered or "youtu.be" in lowered or "youtube-nocookie.com" in lowered:
        return "youtube"
    if "bilibili.com" in lowered or "b23.tv" in lowered:
        return "bilibili"
    return None


def parse_youtube_url(url: str) -> str | None:
    """Extract the video id from a watch, short or embed YouTube URL."""
    for pattern in YOUTUBE_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def parse_bilibili_url(url: str) -> BilibiliId | None:
    """Extract the BV or av number from a Bilibili video URL.

    Query strings are ignored. b23.tv short links cannot be resolved without
    following the redirect, so they return None like any unknown URL.
    """
    path = url.split("?", 1)[0]
    match = BILIBILI_BV_PATTERN.search(path)
    if match:
        return BilibiliId(bvid=match.group(1))
    match = BILIBILI_AV_PATTERN.search(path)
    if match:
        return BilibiliId(aid=match.group(1))
    return None


def normalize_video_url(url: str, platform: str | None = None) -> str:
    """Canonical watch URL for YouTube links; other URLs are returned trimmed."""
    url = (url or "").strip()
    if not url:
        return ""
    if platform in (None, "auto"):
        platform = detect_platform(url)
    if platform == "youtube":
        video_id = parse_youtube_url(url)
        if video_id:
            return f"https://www.youtube.com/watch?v={video_id}"
    return url


def _youtube_embed(video_id: str, item: VideoItem) -> str:
    params = {
        "autoplay": int(bool(item.autoplay)),
        "mute": int(bool(item.muted)),
        "controls": int(item.controls is not False),
        "rel": 0,
        "modestbranding": 1,
    }
    if item.loop:
        # YouTube only loops a single video when it is also the playlist
        params["loop"] = 1
        params["playlist"] = video_id
    if item.start_time:
        params["start"] = int(item.start_time)
    return f"https://www.youtube-nocookie.com/embed/{video_id}?{urlencode(params)}"


def _bilibili_embed(ident: BilibiliId, item: VideoItem) -> str:
    params: dict[str, str | int] = {}
    if ident.bvid:
        params["bvid"] = ident.bvid
    else:
        params["aid"] = ident.aid or ""
    params["autoplay"] = int(bool(item.autoplay))
    if item.muted:
        params["muted"] = 1
    if item.start_time:
        params["t"] = int(item.start_time)
    return f"https://player.bilibili.com/player.html?{urlencode(params)}"


def resolve_embed(item: VideoItem) -> VideoEmbed | None:
    """Build the player embed for ``item``, or None when the URL is unusable."""
    url = (item.url or "").strip()
    if not url:
        return None
    platform = item.platform if item.platform in ("youtube", "bilibili") else detect_platform(url)
    title = item.title or "Video"

    if platform == "youtube":
        video_id = parse_youtube_url(url)
        if video_id:
            return VideoEmbed("youtube", _youtube_embed(video_id, item), title)
    elif platform == "bilibili":
        ident = parse_bilibili_url(url)
        if ident is not None:
            return VideoEmbed("bilibili", _bilibili_embed(ident, item), title)
    return None


def aspect_padding(aspect_ratio: str | None) -> str | None:
    """CSS padding-top for a fixed aspect ratio box; None for ``auto``."""
    if aspect_ratio == "auto":
        return None
    return _ASPECT_PADDING.get(aspect_ratio or "16:9")
