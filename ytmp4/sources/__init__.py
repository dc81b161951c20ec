"""
Video source implementations
"""

from .base import VideoSource
from .ytdlp_source import YtDlpSource

__all__ = ["VideoSource", "YtDlpSource"]
