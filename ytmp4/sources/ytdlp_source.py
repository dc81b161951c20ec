# ------------
# yt-dlp backed video source
# Metadata via yt-dlp extraction, bytes via a plain streaming HTTP GET
# ------------

import logging
from typing import Dict, Iterator, List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from yt_dlp import YoutubeDL
from yt_dlp.extractor.youtube import YoutubeIE
from yt_dlp.utils import DownloadError as YtDlpDownloadError
from yt_dlp.utils import ExtractorError, GeoRestrictedError, UnsupportedError

from ytmp4.constants import DownloadConstants
from ytmp4.download.errors import (
    InvalidUrlError,
    MetadataExtractionError,
    RemoteUnavailableError,
    StreamError,
    UnavailableReason,
)
from ytmp4.download.models import Rendition, VideoMetadata

from .base import VideoSource

logger = logging.getLogger(__name__)

# HLS/DASH manifests need a segment downloader; only direct files are offered
STREAMABLE_PROTOCOLS = ("http", "https")

# a watch URL opened from a playlist is still a single video here
PLAYLIST_QUERY_PARAMS = ("list", "index", "start_radio")

# yt-dlp reports expected YouTube refusals as ExtractorError prose only,
# so the reason is recovered here and nowhere else
_UNAVAILABLE_MARKERS = [
    (UnavailableReason.AGE_RESTRICTED, ("sign in to confirm your age", "age-restricted", "age restricted")),
    (UnavailableReason.PRIVATE, ("private video", "video is private")),
    (UnavailableReason.REMOVED, ("has been removed", "account associated with this video has been terminated")),
    (UnavailableReason.GEO_RESTRICTED, ("not available in your country", "geo restricted", "geo-restricted")),
]


def _unavailable_reason(message: str) -> UnavailableReason:
    lowered = (message or "").lower()
    for reason, markers in _UNAVAILABLE_MARKERS:
        if any(marker in lowered for marker in markers):
            return reason
    return UnavailableReason.UNAVAILABLE


def strip_playlist_params(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in PLAYLIST_QUERY_PARAMS
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


def _has_track(codec: Optional[str]) -> bool:
    return bool(codec) and codec != "none"


def format_to_rendition(fmt: Dict) -> Rendition:
    """Map a yt-dlp format dict onto a Rendition"""
    height = fmt.get("height")
    vcodec = fmt.get("vcodec")
    has_video = _has_track(vcodec) if vcodec is not None else bool(height)
    filesize = fmt.get("filesize")
    return Rendition(
        has_video=has_video,
        has_audio=_has_track(fmt.get("acodec")),
        container=fmt.get("ext") or "",
        height=int(height) if height else None,
        content_length=int(filesize) if filesize else None,
        format_id=str(fmt.get("format_id") or ""),
        note=fmt.get("format_note") or "",
    )


class YtDlpSource(VideoSource):
    """YouTube source backed by yt-dlp and requests"""

    def __init__(
        self,
        proxy: Optional[str] = None,
        cookies_path: Optional[str] = None,
        socket_timeout: float = DownloadConstants.DEFAULT_SOCKET_TIMEOUT,
        chunk_size: int = DownloadConstants.DEFAULT_CHUNK_SIZE,
    ):
        self.proxy = proxy or None
        self.cookies_path = cookies_path or None
        self.socket_timeout = socket_timeout
        self.chunk_size = chunk_size

    @property
    def source_name(self) -> str:
        return "yt-dlp"

    def validate_url(self, url: str) -> bool:
        if not url or not isinstance(url, str):
            return False
        return bool(YoutubeIE.suitable(strip_playlist_params(url.strip())))

    def _ydl_options(self) -> Dict:
        ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "skip_download": True,
            "socket_timeout": self.socket_timeout,
            # an empty format list is reported by the selector, not by yt-dlp
            "ignore_no_formats_error": True,
        }
        if self.proxy:
            ydl_opts["proxy"] = self.proxy
        if self.cookies_path:
            ydl_opts["cookiefile"] = self.cookies_path
        return ydl_opts

    def get_metadata(self, url: str) -> VideoMetadata:
        try:
            with YoutubeDL(self._ydl_options()) as ydl:
                info = ydl.extract_info(url, download=False)
        except (YtDlpDownloadError, ExtractorError) as e:
            raise self._translate_error(url, e) from e

        if not info:
            raise MetadataExtractionError("yt-dlp returned no information")
        if info.get("_type") == "playlist":
            raise InvalidUrlError(url)

        formats = info.get("formats") or []
        renditions = tuple(
            format_to_rendition(fmt) for fmt in formats if self._is_streamable(fmt)
        )
        logger.debug("Extracted %d formats, %d streamable", len(formats), len(renditions))
        return VideoMetadata(title=info.get("title") or "", renditions=renditions, raw=info)

    def _translate_error(self, url: str, error: Exception):
        """Map yt-dlp exceptions onto the download error taxonomy"""
        cause = error
        exc_info = getattr(error, "exc_info", None)
        if isinstance(error, YtDlpDownloadError) and exc_info and exc_info[1] is not None:
            cause = exc_info[1]

        detail = str(cause)
        if isinstance(cause, GeoRestrictedError):
            return RemoteUnavailableError(UnavailableReason.GEO_RESTRICTED, detail)
        if isinstance(cause, UnsupportedError):
            return InvalidUrlError(url)
        if isinstance(cause, ExtractorError) and cause.expected:
            message = getattr(cause, "orig_msg", None) or detail
            return RemoteUnavailableError(_unavailable_reason(message), detail)
        return MetadataExtractionError(detail)

    @staticmethod
    def _is_streamable(fmt: Dict) -> bool:
        if not fmt.get("url"):
            return False
        protocol = fmt.get("protocol")
        if protocol:
            return protocol in STREAMABLE_PROTOCOLS
        return str(fmt["url"]).startswith(("http://", "https://"))

    def _find_format(self, metadata: VideoMetadata, rendition: Rendition) -> Dict:
        for fmt in metadata.raw.get("formats") or []:
            if str(fmt.get("format_id")) == rendition.format_id:
                return fmt
        raise StreamError(f"Format {rendition.format_id!r} is not part of the extracted metadata")

    def open_stream(self, metadata: VideoMetadata, rendition: Rendition) -> Iterator[bytes]:
        fmt = self._find_format(metadata, rendition)
        headers = dict(fmt.get("http_headers") or {})
        ranges = self._byte_ranges(fmt, rendition.content_length)
        return self._iter_content(fmt["url"], headers, ranges)

    @staticmethod
    def _byte_ranges(fmt: Dict, content_length: Optional[int]) -> List[Optional[str]]:
        """
        Range headers to request the file with

        YouTube throttles long single requests, so yt-dlp advertises an
        ``http_chunk_size`` for such formats; the file is then fetched in
        consecutive ranges of that size.
        """
        chunk = (fmt.get("downloader_options") or {}).get("http_chunk_size")
        if not chunk or not content_length:
            return [None]
        return [
            f"bytes={start}-{min(start + chunk, content_length) - 1}"
            for start in range(0, content_length, chunk)
        ]

    def _iter_content(self, url: str, headers: Dict, ranges: List[Optional[str]]) -> Iterator[bytes]:
        proxies = {"http": self.proxy, "https": self.proxy} if self.proxy else None
        try:
            with requests.Session() as session:
                for byte_range in ranges:
                    request_headers = dict(headers)
                    if byte_range:
                        request_headers["Range"] = byte_range
                    with session.get(
                        url,
                        headers=request_headers,
                        stream=True,
                        timeout=self.socket_timeout,
                        proxies=proxies,
                    ) as response:
                        response.raise_for_status()
                        if byte_range and response.status_code != 206:
                            # a server ignoring Range would resend the whole file per request
                            raise StreamError(
                                f"Server ignored range request {byte_range} (HTTP {response.status_code})"
                            )
                        for chunk in response.iter_content(chunk_size=self.chunk_size):
                            if chunk:
                                yield chunk
        except requests.RequestException as e:
            raise StreamError(f"Download stream failed: {e}") from e
