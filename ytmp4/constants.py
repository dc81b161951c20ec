# ------------
# ytmp4 Constants Management
# Unified constants to avoid scattered magic values
# ------------


class DownloadConstants:
    """Download and streaming related constants"""

    DEFAULT_CHUNK_SIZE = 1024 * 1024
    DEFAULT_SOCKET_TIMEOUT = 30
    PROGRESS_CAP = 0.95
    UNKNOWN_SIZE_ESTIMATE_MB = 100
    PREFERRED_CONTAINER = "mp4"
    OUTPUT_SUFFIX = ".mp4"


class FileConstants:
    """File handling related constants"""

    MAX_FILENAME_LENGTH = 200
    # common filesystem limit for a single name, in encoded bytes
    MAX_FILENAME_BYTES = 255
    DEFAULT_FILENAME = "video"
    ILLEGAL_FILENAME_CHARS = '<>:"/\\|?*'
    DEBUG_ARTIFACT_PATTERN = r"^\d+-player-script\.js$"


class ConfigContract:
    """Configuration contract: centralize keys, defaults and types"""

    K_OUTPUT_DIR = "download.output_dir"
    K_CHUNK_SIZE = "download.chunk_size"
    K_MAX_FILENAME_LENGTH = "download.max_filename_length"
    K_PROGRESS_CAP = "download.progress_cap"
    K_UNKNOWN_SIZE_ESTIMATE_MB = "download.unknown_size_estimate_mb"
    K_SOCKET_TIMEOUT = "download.socket_timeout"
    K_YT_PROXY = "youtube.proxy"
    K_YT_COOKIES_PATH = "youtube.cookies_path"
    K_DEBUG_ARTIFACT_PATTERN = "cleanup.debug_artifact_pattern"
    K_LOG_LEVEL = "debug.log_level"

    DEFAULTS = {
        K_OUTPUT_DIR: "",
        K_CHUNK_SIZE: DownloadConstants.DEFAULT_CHUNK_SIZE,
        K_MAX_FILENAME_LENGTH: FileConstants.MAX_FILENAME_LENGTH,
        K_PROGRESS_CAP: DownloadConstants.PROGRESS_CAP,
        K_UNKNOWN_SIZE_ESTIMATE_MB: DownloadConstants.UNKNOWN_SIZE_ESTIMATE_MB,
        K_SOCKET_TIMEOUT: DownloadConstants.DEFAULT_SOCKET_TIMEOUT,
        K_YT_PROXY: "",
        K_YT_COOKIES_PATH: "",
        K_DEBUG_ARTIFACT_PATTERN: FileConstants.DEBUG_ARTIFACT_PATTERN,
        K_LOG_LEVEL: "WARNING",
    }

    TYPES = {
        K_CHUNK_SIZE: int,
        K_MAX_FILENAME_LENGTH: int,
        K_PROGRESS_CAP: float,
        K_UNKNOWN_SIZE_ESTIMATE_MB: float,
        K_SOCKET_TIMEOUT: float,
    }
