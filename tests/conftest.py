"""
Pytest configuration and fixtures for ytmp4 tests
"""

import logging

import pytest

from ytmp4.download.errors import StreamError
from ytmp4.download.models import Rendition, VideoMetadata
from ytmp4.sources.base import VideoSource
from ytmp4.utils import config_utils, observability


def _make_rendition(height=None, has_video=True, has_audio=True, container="mp4",
                   content_length=None, format_id=None):
    """Build a rendition with sensible defaults for selector tests"""
    return Rendition(
        has_video=has_video,
        has_audio=has_audio,
        container=container,
        height=height,
        content_length=content_length,
        format_id=format_id or f"f{height}-{container}-{int(has_audio)}",
    )


class ChunkSource:
    """Finite chunk iterator that can fail after a number of chunks and records close()"""

    def __init__(self, chunks, fail_after=None, error=None):
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.error = error or StreamError("connection reset")
        self.closed = False
        self.yielded = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self.fail_after is not None and self.yielded >= self.fail_after:
            raise self.error
        if self.yielded >= len(self.chunks):
            raise StopIteration
        chunk = self.chunks[self.yielded]
        self.yielded += 1
        return chunk

    def close(self):
        self.closed = True


class FakeSource(VideoSource):
    """In-memory video source used instead of the network"""

    def __init__(self, title="Test Video", renditions=None, chunks=None, valid=True,
                 metadata_error=None, stream=None):
        self.title = title
        self.renditions = tuple(renditions if renditions is not None else [_make_rendition(720, content_length=6)])
        self.chunks = chunks if chunks is not None else [b"abc", b"def"]
        self.valid = valid
        self.metadata_error = metadata_error
        self.stream = stream
        self.opened = []

    def validate_url(self, url):
        return self.valid

    def get_metadata(self, url):
        if self.metadata_error is not None:
            raise self.metadata_error
        return VideoMetadata(title=self.title, renditions=self.renditions)

    def open_stream(self, metadata, rendition):
        self.opened.append(rendition)
        if self.stream is not None:
            return self.stream
        return ChunkSource(self.chunks)


@pytest.fixture
def make_rendition():
    return _make_rendition


@pytest.fixture
def chunk_source():
    """Factory: chunk_source(chunks, fail_after=None, error=None)"""
    return ChunkSource


@pytest.fixture
def fake_source_factory():
    return FakeSource


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture(autouse=True)
def isolate_tests(monkeypatch, tmp_path):
    """Isolate tests from the user's config file and environment"""
    for var in config_utils.ENV_MAPPINGS.values():
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv(config_utils.CONFIG_PATH_ENV, str(tmp_path / "missing-config.yaml"))
    config_utils.invalidate_cache()
    yield
    config_utils.invalidate_cache()


@pytest.fixture(autouse=True)
def reset_logging():
    """Return the ytmp4 logger to its unconfigured state after each test"""
    yield
    logger = logging.getLogger("ytmp4")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    observability._INIT_DONE = False
