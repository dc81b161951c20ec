"""
Tests for the yt-dlp backed source; yt-dlp and HTTP are mocked, no network access
"""

from unittest.mock import MagicMock

import pytest
import requests
from yt_dlp.utils import DownloadError as YtDlpDownloadError
from yt_dlp.utils import ExtractorError, GeoRestrictedError, UnsupportedError

from ytmp4.download.errors import (
    InvalidUrlError,
    MetadataExtractionError,
    RemoteUnavailableError,
    StreamError,
    UnavailableReason,
)
from ytmp4.download.models import Rendition, VideoMetadata
from ytmp4.sources.ytdlp_source import YtDlpSource, format_to_rendition, strip_playlist_params

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

SAMPLE_FORMATS = [
    {
        "format_id": "sb0", "ext": "mhtml", "vcodec": "none", "acodec": "none",
        "protocol": "mhtml", "url": "https://i.ytimg.com/sb/0",
    },
    {
        "format_id": "18", "ext": "mp4", "vcodec": "avc1.42001E", "acodec": "mp4a.40.2",
        "height": 360, "filesize": 1000, "format_note": "360p", "protocol": "https",
        "url": "https://rr1.googlevideo.com/18", "http_headers": {"User-Agent": "UA"},
    },
    {
        "format_id": "137", "ext": "mp4", "vcodec": "avc1.640028", "acodec": "none",
        "height": 1080, "filesize": None, "format_note": "1080p", "protocol": "https",
        "url": "https://rr1.googlevideo.com/137",
    },
    {
        "format_id": "140", "ext": "m4a", "vcodec": "none", "acodec": "mp4a.40.2",
        "protocol": "https", "url": "https://rr1.googlevideo.com/140",
    },
    {
        "format_id": "hls-720", "ext": "mp4", "vcodec": "avc1", "acodec": "mp4a",
        "height": 720, "protocol": "m3u8_native", "url": "https://manifest.googlevideo.com/720.m3u8",
    },
]


@pytest.fixture
def mock_ydl(mocker):
    """Patch YoutubeDL and return the instance used inside the with block"""
    ydl_class = mocker.patch("ytmp4.sources.ytdlp_source.YoutubeDL")
    instance = MagicMock()
    ydl_class.return_value.__enter__.return_value = instance
    instance.ydl_class = ydl_class
    return instance


def _download_error(cause):
    return YtDlpDownloadError(f"ERROR: {cause}", (type(cause), cause, None))


class TestFormatToRendition:
    def test_muxed_format(self):
        rendition = format_to_rendition(SAMPLE_FORMATS[1])
        assert rendition == Rendition(
            has_video=True, has_audio=True, container="mp4", height=360,
            content_length=1000, format_id="18", note="360p",
        )

    def test_video_only_without_size(self):
        rendition = format_to_rendition(SAMPLE_FORMATS[2])
        assert rendition.has_video and not rendition.has_audio
        assert rendition.content_length is None

    def test_audio_only(self):
        rendition = format_to_rendition(SAMPLE_FORMATS[3])
        assert not rendition.has_video and rendition.has_audio
        assert rendition.height is None

    def test_unknown_vcodec_with_height_counts_as_video(self):
        rendition = format_to_rendition({"format_id": "x", "ext": "mp4", "height": 480})
        assert rendition.has_video


class TestValidateUrl:
    @pytest.mark.parametrize(
        "url",
        [
            URL,
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PLFgquLnL59alCl_2TQvOiD5Vgm1hCaGSI&index=2",
        ],
    )
    def test_accepts_youtube_videos(self, url):
        assert YtDlpSource().validate_url(url)

    def test_strip_playlist_params(self):
        url = "https://www.youtube.com/watch?v=abc&list=PL1&index=3&t=42"
        assert strip_playlist_params(url) == "https://www.youtube.com/watch?v=abc&t=42"
        assert strip_playlist_params("https://youtu.be/abc") == "https://youtu.be/abc"

    @pytest.mark.parametrize("url", ["", None, "https://vimeo.com/12345", "not a url"])
    def test_rejects_others(self, url):
        assert not YtDlpSource().validate_url(url)


class TestGetMetadata:
    def test_builds_renditions_from_streamable_formats(self, mock_ydl):
        mock_ydl.extract_info.return_value = {"title": "Never Gonna", "formats": SAMPLE_FORMATS}

        metadata = YtDlpSource().get_metadata(URL)

        assert metadata.title == "Never Gonna"
        assert [r.format_id for r in metadata.renditions] == ["18", "137", "140"]
        mock_ydl.extract_info.assert_called_once_with(URL, download=False)

    def test_ydl_options(self, mock_ydl):
        mock_ydl.extract_info.return_value = {"title": "t", "formats": []}

        YtDlpSource(proxy="http://proxy:8080", cookies_path="cookies.txt", socket_timeout=5).get_metadata(URL)

        options = mock_ydl.ydl_class.call_args[0][0]
        assert options["proxy"] == "http://proxy:8080"
        assert options["cookiefile"] == "cookies.txt"
        assert options["socket_timeout"] == 5
        assert options["noplaylist"] is True
        assert options["ignore_no_formats_error"] is True

    def test_no_proxy_or_cookies_by_default(self, mock_ydl):
        mock_ydl.extract_info.return_value = {"title": "t", "formats": []}
        YtDlpSource(proxy="", cookies_path="").get_metadata(URL)
        options = mock_ydl.ydl_class.call_args[0][0]
        assert "proxy" not in options
        assert "cookiefile" not in options

    def test_empty_formats_give_empty_renditions(self, mock_ydl):
        mock_ydl.extract_info.return_value = {"title": "t"}
        assert YtDlpSource().get_metadata(URL).renditions == ()

    def test_playlist_is_rejected(self, mock_ydl):
        mock_ydl.extract_info.return_value = {"_type": "playlist", "entries": []}
        with pytest.raises(InvalidUrlError):
            YtDlpSource().get_metadata(URL)

    def test_none_info_is_extraction_failure(self, mock_ydl):
        mock_ydl.extract_info.return_value = None
        with pytest.raises(MetadataExtractionError):
            YtDlpSource().get_metadata(URL)

    @pytest.mark.parametrize(
        "message,reason",
        [
            ("Sign in to confirm your age. This video may be inappropriate", UnavailableReason.AGE_RESTRICTED),
            ("Private video. Sign in if you've been granted access", UnavailableReason.PRIVATE),
            ("This video has been removed by the uploader", UnavailableReason.REMOVED),
            ("Video unavailable", UnavailableReason.UNAVAILABLE),
        ],
    )
    def test_expected_extractor_errors_are_remote_unavailable(self, mock_ydl, message, reason):
        cause = ExtractorError(message, expected=True)
        mock_ydl.extract_info.side_effect = _download_error(cause)

        with pytest.raises(RemoteUnavailableError) as exc_info:
            YtDlpSource().get_metadata(URL)

        assert exc_info.value.reason is reason

    def test_geo_restriction(self, mock_ydl):
        mock_ydl.extract_info.side_effect = _download_error(GeoRestrictedError("blocked"))
        with pytest.raises(RemoteUnavailableError) as exc_info:
            YtDlpSource().get_metadata(URL)
        assert exc_info.value.reason is UnavailableReason.GEO_RESTRICTED

    def test_unsupported_url(self, mock_ydl):
        mock_ydl.extract_info.side_effect = _download_error(UnsupportedError("https://example.com"))
        with pytest.raises(InvalidUrlError):
            YtDlpSource().get_metadata("https://example.com")

    def test_unexpected_extractor_error(self, mock_ydl):
        cause = ExtractorError("Could not extract functions", expected=False)
        mock_ydl.extract_info.side_effect = _download_error(cause)

        with pytest.raises(MetadataExtractionError) as exc_info:
            YtDlpSource().get_metadata(URL)

        assert "Could not extract functions" in exc_info.value.detail
        assert isinstance(exc_info.value.__cause__, YtDlpDownloadError)

    def test_download_error_without_cause(self, mock_ydl):
        mock_ydl.extract_info.side_effect = YtDlpDownloadError("ERROR: something odd")
        with pytest.raises(MetadataExtractionError):
            YtDlpSource().get_metadata(URL)


def _metadata():
    renditions = tuple(format_to_rendition(f) for f in SAMPLE_FORMATS[1:4])
    return VideoMetadata(title="t", renditions=renditions, raw={"formats": SAMPLE_FORMATS})


def _response(chunks, status_error=None, status_code=200):
    response = MagicMock()
    response.__enter__.return_value = response
    response.status_code = status_code
    response.iter_content.return_value = iter(chunks)
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


@pytest.fixture
def mock_session(mocker):
    session_class = mocker.patch("ytmp4.sources.ytdlp_source.requests.Session")
    session = MagicMock()
    session_class.return_value.__enter__.return_value = session
    return session


class TestOpenStream:
    def test_streams_chunks_with_format_headers(self, mock_session):
        mock_session.get.return_value = _response([b"ab", b"", b"cd"])
        metadata = _metadata()

        chunks = list(YtDlpSource(chunk_size=2).open_stream(metadata, metadata.renditions[0]))

        assert chunks == [b"ab", b"cd"]
        args, kwargs = mock_session.get.call_args
        assert args == ("https://rr1.googlevideo.com/18",)
        assert kwargs["headers"] == {"User-Agent": "UA"}
        assert kwargs["stream"] is True
        assert kwargs["proxies"] is None

    def test_stream_is_lazy(self, mock_session):
        metadata = _metadata()
        YtDlpSource().open_stream(metadata, metadata.renditions[0])
        mock_session.get.assert_not_called()

    def test_proxy_is_forwarded(self, mock_session):
        mock_session.get.return_value = _response([b"x"])
        metadata = _metadata()

        list(YtDlpSource(proxy="socks5://p:1").open_stream(metadata, metadata.renditions[0]))

        assert mock_session.get.call_args[1]["proxies"] == {"http": "socks5://p:1", "https": "socks5://p:1"}

    def test_ranged_requests_for_throttled_formats(self, mock_session):
        formats = [dict(SAMPLE_FORMATS[1], filesize=10, downloader_options={"http_chunk_size": 4})]
        metadata = VideoMetadata(title="t", renditions=(format_to_rendition(formats[0]),), raw={"formats": formats})
        mock_session.get.side_effect = [
            _response([b"aaaa"], status_code=206),
            _response([b"bbbb"], status_code=206),
            _response([b"cc"], status_code=206),
        ]

        chunks = list(YtDlpSource().open_stream(metadata, metadata.renditions[0]))

        assert chunks == [b"aaaa", b"bbbb", b"cc"]
        ranges = [call[1]["headers"]["Range"] for call in mock_session.get.call_args_list]
        assert ranges == ["bytes=0-3", "bytes=4-7", "bytes=8-9"]

    def test_range_ignored_by_server_is_stream_error(self, mock_session):
        formats = [dict(SAMPLE_FORMATS[1], filesize=10, downloader_options={"http_chunk_size": 4})]
        metadata = VideoMetadata(title="t", renditions=(format_to_rendition(formats[0]),), raw={"formats": formats})
        mock_session.get.side_effect = lambda *args, **kwargs: _response([b"0123456789"], status_code=200)

        received = []
        with pytest.raises(StreamError, match="ignored range"):
            for chunk in YtDlpSource().open_stream(metadata, metadata.renditions[0]):
                received.append(chunk)

        assert received == []
        assert mock_session.get.call_count == 1

    def test_http_error_becomes_stream_error(self, mock_session):
        mock_session.get.return_value = _response([], status_error=requests.HTTPError("403 Forbidden"))
        metadata = _metadata()

        with pytest.raises(StreamError, match="403"):
            list(YtDlpSource().open_stream(metadata, metadata.renditions[0]))

    def test_connection_drop_mid_stream(self, mock_session):
        def chunks():
            yield b"abc"
            raise requests.ConnectionError("connection reset")

        response = _response([])
        response.iter_content.return_value = chunks()
        mock_session.get.return_value = response
        metadata = _metadata()

        stream = YtDlpSource().open_stream(metadata, metadata.renditions[0])
        assert next(stream) == b"abc"
        with pytest.raises(StreamError, match="connection reset"):
            next(stream)

    def test_unknown_format_id(self):
        metadata = _metadata()
        stray = Rendition(has_video=True, has_audio=True, container="mp4", format_id="999")
        with pytest.raises(StreamError):
            YtDlpSource().open_stream(metadata, stray)


def test_source_name():
    assert YtDlpSource().source_name == "yt-dlp"
