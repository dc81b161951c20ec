# Core utilities module
"""
Shared utilities: configuration access and logging.
"""

from .config_utils import load_key, load_all_config, invalidate_cache, get_config_path
from .observability import init_logging, log_event, time_block

__all__ = [
    # Config management
    "load_key",
    "load_all_config",
    "invalidate_cache",
    "get_config_path",
    # Logging
    "init_logging",
    "log_event",
    "time_block",
]
