# ------------
# Video source interface
# Narrow boundary to the video-hosting service: URL check, metadata, byte stream
# ------------

from abc import ABC, abstractmethod
from typing import Iterator

from ytmp4.download.models import Rendition, VideoMetadata


class VideoSource(ABC):
    """Video-hosting service client consumed by the download pipeline

    Implementations translate their own failures into the errors of
    ``ytmp4.download.errors`` before they cross this boundary.
    """

    @abstractmethod
    def validate_url(self, url: str) -> bool:
        """Whether the URL points at a video this source can fetch"""
        pass

    @abstractmethod
    def get_metadata(self, url: str) -> VideoMetadata:
        """Title and renditions of the video

        Raises:
            InvalidUrlError, RemoteUnavailableError, MetadataExtractionError
        """
        pass

    @abstractmethod
    def open_stream(self, metadata: VideoMetadata, rendition: Rendition) -> Iterator[bytes]:
        """Lazy, finite, non-restartable sequence of byte chunks for a rendition

        Raises:
            StreamError
        """
        pass

    @property
    def source_name(self) -> str:
        """Short label used in log lines"""
        return type(self).__name__
