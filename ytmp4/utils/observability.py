# ------------
# Unified Observability: structured logging for download stages
# ------------

import logging
import time

_INIT_DONE = False

LEVEL_MAP = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] stage=%(stage)s op=%(op)s %(message)s"


class _StageFieldsFilter(logging.Filter):
    # plain logger calls have no stage/op; fill them so the format never breaks
    def filter(self, record):
        if not hasattr(record, "stage"):
            record.stage = "-"
        if not hasattr(record, "op"):
            record.op = "-"
        return True


def _read_level(default="WARNING"):
    try:
        from ytmp4.utils.config_utils import load_key

        return str(load_key("debug.log_level") or default).upper()
    except Exception:
        return default


def init_logging(level=None, force=False):
    """
    Configure the ``ytmp4`` logger once

    Args:
        level (str, optional): Level name; read from ``debug.log_level`` when omitted
        force (bool): Re-apply the level even if logging was already initialized
    """
    global _INIT_DONE
    if _INIT_DONE and not force:
        return

    level_str = (level or _read_level()).upper()
    logger = logging.getLogger("ytmp4")
    logger.setLevel(LEVEL_MAP.get(level_str, logging.WARNING))

    # avoid duplicate handlers
    if not logger.handlers:
        console = logging.StreamHandler()
        console.addFilter(_StageFieldsFilter())
        console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(console)
        logger.propagate = False

    _INIT_DONE = True


def _default_fields(extra):
    return {
        "stage": extra.get("stage") or "-",
        "op": extra.get("op") or "-",
    }


def log_event(level, message, **extra):
    init_logging()

    fields = _default_fields(extra)
    logger = logging.getLogger(extra.get("logger") or __name__)

    try:
        level_name = str(level).lower()
        if level_name == "debug":
            logger.debug(message, extra=fields)
        elif level_name in ["warn", "warning"]:
            logger.warning(message, extra=fields)
        elif level_name == "error":
            logger.error(message, extra=fields)
        else:
            logger.info(message, extra=fields)
    except Exception:
        # never break a download on logging errors
        pass


class time_block:
    # simple context manager for timing
    def __init__(self, label, **extra):
        self.label = label
        self.extra = extra
        self.start = None

    def __enter__(self):
        self.start = time.time()
        log_event("debug", f"start: {self.label}", **self.extra)
        return self

    def __exit__(self, exc_type, exc, tb):
        dur_ms = int((time.time() - self.start) * 1000) if self.start else -1
        if exc:
            log_event("debug", f"fail: {self.label} ({dur_ms} ms): {str(exc)[:200]}", **self.extra)
        else:
            log_event("info", f"end: {self.label} ({dur_ms} ms)", **self.extra)
        return False
