"""
Filename utilities for video download operations
Single responsibility: Handle filename sanitization and output path resolution
"""

import os
import re

from ytmp4.constants import DownloadConstants, FileConstants

_ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_WHITESPACE = re.compile(r"\s+")

# room for the suffix appended by build_output_filename
_MAX_STEM_BYTES = FileConstants.MAX_FILENAME_BYTES - len(DownloadConstants.OUTPUT_SUFFIX.encode("utf-8"))


def _truncate_to_bytes(filename, max_bytes):
    encoded = filename.encode("utf-8")
    if len(encoded) <= max_bytes:
        return filename
    # drop a multi-byte character cut in half rather than emit invalid UTF-8
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def sanitize_filename(filename, max_length=FileConstants.MAX_FILENAME_LENGTH, max_bytes=_MAX_STEM_BYTES):
    """
    Sanitize filename by removing illegal characters

    Args:
        filename (str): Original filename
        max_length (int): Maximum number of characters of the result
        max_bytes (int): Maximum UTF-8 encoded size of the result

    Returns:
        str: Sanitized filename safe for filesystem
    """
    # Remove illegal characters, then normalize whitespace
    filename = _ILLEGAL_CHARS.sub("", filename or "")
    filename = _WHITESPACE.sub(" ", filename).strip()
    filename = _truncate_to_bytes(filename[:max_length], max_bytes).rstrip()
    # Use default name if filename is empty
    return filename if filename else FileConstants.DEFAULT_FILENAME


def build_output_filename(title, output_name=None, max_length=FileConstants.MAX_FILENAME_LENGTH):
    """
    Derive the output filename from the user supplied name or the video title

    Args:
        title (str): Video title reported by the source
        output_name (str, optional): Name given on the command line
        max_length (int): Maximum length before the suffix is appended

    Returns:
        str: Sanitized filename ending in ``.mp4``
    """
    filename = sanitize_filename(output_name if output_name else title, max_length)
    if not filename.endswith(DownloadConstants.OUTPUT_SUFFIX):
        filename += DownloadConstants.OUTPUT_SUFFIX
    return filename


def resolve_output_path(filename, output_dir=None):
    """Absolute path of ``filename`` inside ``output_dir`` (current directory by default)"""
    base_dir = output_dir or os.getcwd()
    return os.path.abspath(os.path.join(base_dir, filename))
