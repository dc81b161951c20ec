"""
Stream copy utilities
Single responsibility: Copy a byte stream to disk with progress and partial-file cleanup
"""

import logging
import os
from typing import Callable, Iterable, Optional

from ytmp4.constants import DownloadConstants

from .errors import DestinationExistsError, DownloadError, DownloadIOError, StreamError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def estimate_progress(
    bytes_so_far: int,
    expected_total_bytes: Optional[int] = None,
    cap: float = DownloadConstants.PROGRESS_CAP,
    unknown_size_estimate_mb: float = DownloadConstants.UNKNOWN_SIZE_ESTIMATE_MB,
) -> float:
    """
    Fraction of the transfer completed, for display only

    With a known total the fraction is exact. Without one it is a rough guess
    against ``unknown_size_estimate_mb`` and never exceeds ``cap``, so a bar
    cannot reach 100% before the stream actually ends.

    Args:
        bytes_so_far (int): Bytes received
        expected_total_bytes (int, optional): Declared size of the rendition
        cap (float): Upper bound for the unknown-size estimate
        unknown_size_estimate_mb (float): Assumed size when the total is unknown

    Returns:
        float: Value in [0, 1]
    """
    if expected_total_bytes:
        return min(1.0, bytes_so_far / expected_total_bytes)
    reference = unknown_size_estimate_mb * 1024 * 1024
    if reference <= 0:
        return 0.0
    return min(cap, bytes_so_far / reference)


def _close_quietly(source):
    close = getattr(source, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception as e:
        logger.debug("Error while closing source stream: %s", e)


def _remove_quietly(path: str):
    try:
        os.remove(path)
        logger.debug("Removed partial file %s", path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove partial file %s: %s", path, e)


def _abort(source, destination_path: str):
    _close_quietly(source)
    _remove_quietly(destination_path)


def _read_chunks(source: Iterable[bytes]):
    """Yield chunks from ``source``, translating its failures into StreamError"""
    iterator = iter(source)
    while True:
        try:
            chunk = next(iterator)
        except StopIteration:
            return
        except DownloadError:
            raise
        except Exception as e:
            raise StreamError(f"Download stream failed: {e}") from e
        yield chunk


def copy_stream(
    source: Iterable[bytes],
    destination_path: str,
    expected_total_bytes: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> int:
    """
    Copy ``source`` chunks into a new file at ``destination_path``

    The destination must not exist. On any failure, interruption included,
    the source is closed, the partially written file is removed and the
    original error is re-raised. The source is closed on success too.

    Args:
        source (Iterable[bytes]): Lazy, non-restartable chunk sequence
        destination_path (str): File to create
        expected_total_bytes (int, optional): Declared size; a shorter or longer stream is an error
        on_progress (callable, optional): Called with the cumulative byte count after each chunk

    Returns:
        int: Number of bytes written

    Raises:
        DestinationExistsError: If the destination already exists
        DownloadIOError: If the destination cannot be created or written
        StreamError: If the source fails, ends early or exceeds the declared size
    """
    if os.path.exists(destination_path):
        _close_quietly(source)
        raise DestinationExistsError(destination_path)

    try:
        destination = open(destination_path, "xb")
    except FileExistsError:
        _close_quietly(source)
        raise DestinationExistsError(destination_path)
    except OSError as e:
        _close_quietly(source)
        raise DownloadIOError(f"Cannot create {destination_path}: {e}") from e

    bytes_so_far = 0
    try:
        with destination:
            for chunk in _read_chunks(source):
                if not chunk:
                    continue
                if expected_total_bytes and bytes_so_far + len(chunk) > expected_total_bytes:
                    raise StreamError(
                        f"Download stream is longer than the declared {expected_total_bytes} bytes"
                    )
                try:
                    destination.write(chunk)
                except OSError as e:
                    raise DownloadIOError(f"Failed writing to {destination_path}: {e}") from e
                bytes_so_far += len(chunk)
                if on_progress is not None:
                    on_progress(bytes_so_far)

            if expected_total_bytes and bytes_so_far < expected_total_bytes:
                raise StreamError(
                    f"Download stream ended early: received {bytes_so_far} of {expected_total_bytes} bytes"
                )
    except DownloadError:
        _abort(source, destination_path)
        raise
    except OSError as e:
        # flushing on close can fail after the last write succeeded
        _abort(source, destination_path)
        raise DownloadIOError(f"Failed writing to {destination_path}: {e}") from e
    except BaseException:
        _abort(source, destination_path)
        raise

    _close_quietly(source)
    logger.debug("Wrote %d bytes to %s", bytes_so_far, destination_path)
    return bytes_so_far
