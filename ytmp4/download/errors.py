"""
Download error taxonomy
Single responsibility: Define user-facing error kinds and suggestions
"""

from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """Categories of download errors"""
    INVALID_URL = "invalid_url"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    METADATA_EXTRACTION = "metadata_extraction"
    NO_FORMAT = "no_format"
    INVALID_QUALITY = "invalid_quality"
    DESTINATION_EXISTS = "destination_exists"
    IO = "io"
    STREAM = "stream"


class UnavailableReason(Enum):
    """Why the remote service refuses to serve a video"""
    AGE_RESTRICTED = "age_restricted"
    PRIVATE = "private"
    REMOVED = "removed"
    GEO_RESTRICTED = "geo_restricted"
    UNAVAILABLE = "unavailable"


class DownloadError(Exception):
    """Base class for every error reported to the user; all are terminal"""

    category = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUrlError(DownloadError):
    category = ErrorCategory.INVALID_URL

    def __init__(self, url: str):
        super().__init__(f"Invalid YouTube URL: {url}. Please provide a valid YouTube video URL.")
        self.url = url


class RemoteUnavailableError(DownloadError):
    category = ErrorCategory.REMOTE_UNAVAILABLE

    _MESSAGES = {
        UnavailableReason.AGE_RESTRICTED: "This video is age-restricted and cannot be downloaded",
        UnavailableReason.PRIVATE: "This video is private and cannot be downloaded",
        UnavailableReason.REMOVED: "This video has been removed",
        UnavailableReason.GEO_RESTRICTED: "This video is not available in your country",
        UnavailableReason.UNAVAILABLE: "This video is unavailable",
    }

    def __init__(self, reason: UnavailableReason, detail: Optional[str] = None):
        super().__init__(self._MESSAGES[reason])
        self.reason = reason
        self.detail = detail


class MetadataExtractionError(DownloadError):
    category = ErrorCategory.METADATA_EXTRACTION

    def __init__(self, detail: Optional[str] = None):
        message = (
            "Unable to extract video information. YouTube may have changed their site; "
            "try updating yt-dlp or try again later."
        )
        super().__init__(message)
        self.detail = detail


class NoFormatAvailableError(DownloadError):
    category = ErrorCategory.NO_FORMAT

    def __init__(self):
        super().__init__("No video formats available for this video")


class InvalidQualityValueError(DownloadError):
    category = ErrorCategory.INVALID_QUALITY

    def __init__(self, value: str):
        super().__init__(
            f'Invalid quality option: {value}. Use "highest", "lowest", or a number like "720p"'
        )
        self.value = value


class DestinationExistsError(DownloadError):
    category = ErrorCategory.DESTINATION_EXISTS

    def __init__(self, path: str):
        super().__init__(f"File already exists: {path}")
        self.path = path


class DownloadIOError(DownloadError):
    category = ErrorCategory.IO


class StreamError(DownloadError):
    category = ErrorCategory.STREAM


_SUGGESTIONS = {
    ErrorCategory.INVALID_URL: "Check the link; it should look like https://www.youtube.com/watch?v=...",
    ErrorCategory.REMOTE_UNAVAILABLE: "The video cannot be accessed without an account or from your region.",
    ErrorCategory.METADATA_EXTRACTION: "Run `pip install -U yt-dlp` and try again.",
    ErrorCategory.NO_FORMAT: "The video offers no downloadable video stream.",
    ErrorCategory.INVALID_QUALITY: "Valid values: highest, lowest, 360, 720p, 1080 ...",
    ErrorCategory.DESTINATION_EXISTS: "Choose another name with --output or remove the existing file.",
    ErrorCategory.IO: "Check free disk space and write permissions of the output directory.",
    ErrorCategory.STREAM: "The connection was interrupted; check your network and try again.",
}


def get_error_suggestion(error: DownloadError) -> str:
    """
    Get user-friendly suggestion for an error

    Args:
        error (DownloadError): Error raised by the download pipeline

    Returns:
        str: Suggestion line, empty when the error has no category
    """
    return _SUGGESTIONS.get(error.category, "")
