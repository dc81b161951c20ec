"""
Download module
Format selection, stream copying and the manager that ties them to a video source
"""

from .artifact_cleaner import DebugArtifactCleaner
from .download_manager import DownloadConfig, DownloadManager, DownloadObserver
from .errors import (
    DestinationExistsError,
    DownloadError,
    DownloadIOError,
    ErrorCategory,
    InvalidQualityValueError,
    InvalidUrlError,
    MetadataExtractionError,
    NoFormatAvailableError,
    RemoteUnavailableError,
    StreamError,
    UnavailableReason,
    get_error_suggestion,
)
from .filename_utils import build_output_filename, resolve_output_path, sanitize_filename
from .format_selector import candidate_renditions, select_format
from .models import (
    DownloadRequest,
    DownloadResult,
    QualityKind,
    QualityPreference,
    Rendition,
    VideoMetadata,
)
from .quality import parse_quality
from .stream_copier import copy_stream, estimate_progress

__all__ = [
    'DebugArtifactCleaner',
    'DownloadConfig',
    'DownloadManager',
    'DownloadObserver',
    'DestinationExistsError',
    'DownloadError',
    'DownloadIOError',
    'ErrorCategory',
    'InvalidQualityValueError',
    'InvalidUrlError',
    'MetadataExtractionError',
    'NoFormatAvailableError',
    'RemoteUnavailableError',
    'StreamError',
    'UnavailableReason',
    'get_error_suggestion',
    'build_output_filename',
    'resolve_output_path',
    'sanitize_filename',
    'candidate_renditions',
    'select_format',
    'DownloadRequest',
    'DownloadResult',
    'QualityKind',
    'QualityPreference',
    'Rendition',
    'VideoMetadata',
    'parse_quality',
    'copy_stream',
    'estimate_progress',
]
