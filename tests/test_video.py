"""Tests for video URL parsing."""

import pytest

from folio.document.models import VideoItem
from folio.rendering.video import (
    BilibiliId,
    aspect_padding,
    detect_platform,
    normalize_video_url,
    parse_bilibili_url,
    parse_youtube_url,
    resolve_embed,
)


@pytest.mark.parametrize(
    "url, platform",
    [
        ("https://www.youtube.com/watch?v=abc", "youtube"),
        ("https://youtu.be/abc", "youtube"),
        ("https://www.youtube-nocookie.com/embed/abc", "youtube"),
        ("https://www.bilibili.com/video/BV1xx411c7mu", "bilibili"),
        ("https://b23.tv/xyz", "bilibili"),
        ("https://vimeo.com/123", None),
        ("", None),
    ],
)
def test_detect_platform(url, platform):
    assert detect_platform(url) == platform


@pytest.mark.parametrize(
    "url, video_id",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ?t=42", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/channel/UC123", None),
    ],
)
def test_parse_youtube_url(url, video_id):
    assert parse_youtube_url(url) == video_id


class TestParseBilibiliUrl:
    def test_bv_number(self):
        assert parse_bilibili_url("https://www.bilibili.com/video/BV1xx411c7mu?p=2") == BilibiliId(bvid="BV1xx411c7mu")

    def test_av_number(self):
        assert parse_bilibili_url("https://www.bilibili.com/video/av170001/") == BilibiliId(aid="170001")

    def test_short_link_is_unresolved(self):
        assert parse_bilibili_url("https://b23.tv/abc") is None


def test_normalize_video_url():
    assert normalize_video_url(" https://youtu.be/abc ") == "https://www.youtube.com/watch?v=abc"
    assert normalize_video_url("https://www.bilibili.com/video/BV1x") == "https://www.bilibili.com/video/BV1x"
    assert normalize_video_url("   ") == ""


class TestResolveEmbed:
    def test_youtube_player_options(self):
        item = VideoItem(url="https://youtu.be/abc", autoplay=True, muted=True, loop=True, start_time=30)

        embed = resolve_embed(item)

        assert embed.platform == "youtube"
        assert embed.src.startswith("https://www.youtube-nocookie.com/embed/abc?")
        for param in ("autoplay=1", "mute=1", "loop=1", "playlist=abc", "start=30"):
            assert param in embed.src

    def test_bilibili_av(self):
        embed = resolve_embed(VideoItem(url="https://www.bilibili.com/video/av170001"))

        assert embed.src.startswith("https://player.bilibili.com/player.html?aid=170001")

    def test_explicit_platform_overrides_detection(self):
        item = VideoItem(url="https://youtu.be/abc", platform="bilibili")

        assert resolve_embed(item) is None

    def test_unknown_platform(self):
        assert resolve_embed(VideoItem(url="https://vimeo.com/1")) is None


def test_aspect_padding():
    assert aspect_padding(None) == "56.25%"
    assert aspect_padding("4:3") == "75%"
    assert aspect_padding("auto") is None
