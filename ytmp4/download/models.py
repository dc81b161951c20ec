"""
Download data models
Single responsibility: Immutable values passed between source, selector and copier
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Rendition:
    """One encoded version of a video offered by the source"""
    has_video: bool
    has_audio: bool
    container: str
    height: Optional[int] = None
    content_length: Optional[int] = None
    format_id: str = ""
    note: str = ""

    def describe(self) -> str:
        label = self.note or (f"{self.height}p" if self.height else "unknown resolution")
        tracks = "audio+video" if self.has_audio else "video only"
        return f"{label} {self.container} ({tracks})"


class QualityKind(Enum):
    HIGHEST = "highest"
    LOWEST = "lowest"
    TARGET = "target"


@dataclass(frozen=True)
class QualityPreference:
    """Rendition selection strategy: highest, lowest, or closest to a target height"""
    kind: QualityKind
    height: Optional[int] = None

    @classmethod
    def highest(cls) -> "QualityPreference":
        return cls(QualityKind.HIGHEST)

    @classmethod
    def lowest(cls) -> "QualityPreference":
        return cls(QualityKind.LOWEST)

    @classmethod
    def target(cls, height: int) -> "QualityPreference":
        return cls(QualityKind.TARGET, height)

    def __str__(self):
        if self.kind is QualityKind.TARGET:
            return f"{self.height}p"
        return self.kind.value


@dataclass(frozen=True)
class VideoMetadata:
    """Title and renditions of a video; ``raw`` is private to the source that built it"""
    title: str
    renditions: Tuple[Rendition, ...]
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)


@dataclass(frozen=True)
class DownloadRequest:
    url: str
    quality: QualityPreference = field(default_factory=QualityPreference.highest)
    output_name: Optional[str] = None
    output_dir: Optional[str] = None


@dataclass(frozen=True)
class DownloadResult:
    output_path: str
    title: str = ""
    rendition: Optional[Rendition] = None
    bytes_written: int = 0
