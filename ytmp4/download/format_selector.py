"""
Video format selection utilities
Single responsibility: Pick one rendition for a quality preference
"""

import math
from typing import List, Sequence

from ytmp4.constants import DownloadConstants

from .errors import NoFormatAvailableError
from .models import QualityKind, QualityPreference, Rendition


def candidate_renditions(renditions: Sequence[Rendition]) -> List[Rendition]:
    """
    Build the candidate set for selection

    mp4 renditions carrying both audio and video are preferred; when none exist
    every rendition with a video track is a candidate.
    """
    preferred = [
        r for r in renditions
        if r.has_video and r.has_audio and r.container == DownloadConstants.PREFERRED_CONTAINER
    ]
    if preferred:
        return preferred
    return [r for r in renditions if r.has_video]


def _height_or(rendition: Rendition, missing):
    return rendition.height if rendition.height is not None else missing


def select_format(renditions: Sequence[Rendition], preference: QualityPreference) -> Rendition:
    """
    Select a rendition according to the quality preference

    Ties are resolved in favour of the first rendition seen. Missing heights
    count as 0 for "highest" and target matching, and as infinity for "lowest"
    so that renditions without a height never win it.

    Args:
        renditions (Sequence[Rendition]): Renditions offered by the source
        preference (QualityPreference): Selection strategy

    Returns:
        Rendition: The selected rendition, unchanged

    Raises:
        NoFormatAvailableError: If no rendition has a video track
    """
    candidates = candidate_renditions(renditions)
    if not candidates:
        raise NoFormatAvailableError()

    # min/max return the first extreme element, which keeps selection stable
    if preference.kind is QualityKind.HIGHEST:
        return max(candidates, key=lambda r: _height_or(r, 0))
    if preference.kind is QualityKind.LOWEST:
        return min(candidates, key=lambda r: _height_or(r, math.inf))
    if preference.kind is QualityKind.TARGET:
        return min(candidates, key=lambda r: abs(_height_or(r, 0) - preference.height))

    raise ValueError(f"Unknown quality preference: {preference!r}")
