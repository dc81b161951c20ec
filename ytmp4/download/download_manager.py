"""
Main download manager - Orchestrates the download process
Single responsibility: Coordinate one download using the specialized components
"""

import os
from dataclasses import dataclass
from typing import Optional

from ytmp4.constants import ConfigContract, DownloadConstants, FileConstants
from ytmp4.utils.observability import log_event, time_block

from .artifact_cleaner import DebugArtifactCleaner
from .errors import DestinationExistsError, InvalidUrlError
from .filename_utils import build_output_filename, resolve_output_path
from .format_selector import select_format
from .models import DownloadRequest, DownloadResult, Rendition, VideoMetadata
from .stream_copier import copy_stream


@dataclass
class DownloadConfig:
    """Configuration for download operations"""
    output_dir: Optional[str] = None
    max_filename_length: int = FileConstants.MAX_FILENAME_LENGTH
    debug_artifact_pattern: str = FileConstants.DEBUG_ARTIFACT_PATTERN
    cleanup_dir: Optional[str] = None
    progress_cap: float = DownloadConstants.PROGRESS_CAP
    unknown_size_estimate_mb: float = DownloadConstants.UNKNOWN_SIZE_ESTIMATE_MB

    @classmethod
    def from_settings(cls) -> "DownloadConfig":
        """Build the config from config.yaml / environment"""
        from ytmp4.utils.config_utils import load_key

        return cls(
            output_dir=load_key(ConfigContract.K_OUTPUT_DIR) or None,
            max_filename_length=load_key(ConfigContract.K_MAX_FILENAME_LENGTH),
            debug_artifact_pattern=load_key(ConfigContract.K_DEBUG_ARTIFACT_PATTERN),
            progress_cap=load_key(ConfigContract.K_PROGRESS_CAP),
            unknown_size_estimate_mb=load_key(ConfigContract.K_UNKNOWN_SIZE_ESTIMATE_MB),
        )


class DownloadObserver:
    """
    Receives pipeline notifications; the CLI overrides these to drive its spinner and bar
    """

    def on_stage(self, message: str):
        pass

    def on_start(self, metadata: VideoMetadata, rendition: Rendition, output_path: str):
        pass

    def on_progress(self, bytes_so_far: int, expected_total_bytes: Optional[int]):
        pass


class DownloadManager:
    """
    Main download manager that orchestrates video downloads
    Uses composition: the source fetches, the selector chooses, the copier writes
    """

    def __init__(self, source, config: Optional[DownloadConfig] = None):
        self.source = source
        self.config = config or DownloadConfig()
        self.cleaner = DebugArtifactCleaner(self.config.debug_artifact_pattern)

    def download(
        self,
        request: DownloadRequest,
        observer: Optional[DownloadObserver] = None,
    ) -> DownloadResult:
        """
        Download one video as described by ``request``

        Args:
            request (DownloadRequest): URL, quality preference and output name
            observer (DownloadObserver, optional): Receives stage and progress notifications

        Returns:
            DownloadResult: Path of the written file and what was downloaded

        Raises:
            DownloadError: Any failure; no partial output file is left behind
        """
        observer = observer or DownloadObserver()
        try:
            return self._download(request, observer)
        finally:
            # the extraction backend may drop debug dumps whatever the outcome
            self.cleaner.cleanup(self.config.cleanup_dir)

    def _download(self, request: DownloadRequest, observer: DownloadObserver) -> DownloadResult:
        observer.on_stage("Validating YouTube URL...")
        if not self.source.validate_url(request.url):
            raise InvalidUrlError(request.url)

        observer.on_stage("Fetching video information...")
        label = f"fetch metadata via {self.source.source_name}"
        with time_block(label, stage="download", op="get_metadata", logger=__name__):
            metadata = self.source.get_metadata(request.url)

        rendition = select_format(metadata.renditions, request.quality)
        log_event(
            "info",
            f"{self.source.source_name}: selected {rendition.describe()} (format {rendition.format_id}) "
            f"for quality {request.quality}",
            stage="download",
            op="select_format",
            logger=__name__,
        )

        output_path = self.build_output_path(request, metadata)
        log_event("info", f"writing to {output_path}", stage="download", op="resolve_path", logger=__name__)

        observer.on_start(metadata, rendition, output_path)
        stream = self.source.open_stream(metadata, rendition)

        def on_progress(bytes_so_far: int):
            observer.on_progress(bytes_so_far, rendition.content_length)

        with time_block("copy stream", stage="download", op="copy_stream", logger=__name__):
            bytes_written = copy_stream(
                stream,
                output_path,
                expected_total_bytes=rendition.content_length,
                on_progress=on_progress,
            )

        return DownloadResult(
            output_path=output_path,
            title=metadata.title,
            rendition=rendition,
            bytes_written=bytes_written,
        )

    def build_output_path(self, request: DownloadRequest, metadata: VideoMetadata) -> str:
        """Resolve the destination path; fails early if it already exists"""
        filename = build_output_filename(
            metadata.title,
            request.output_name,
            max_length=self.config.max_filename_length,
        )
        output_path = resolve_output_path(filename, request.output_dir or self.config.output_dir)
        if os.path.exists(output_path):
            raise DestinationExistsError(output_path)
        return output_path
