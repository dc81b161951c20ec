import logging
import os
import threading
import time

# Lazy imports - only load heavy modules when needed
_yaml = None
_dotenv_loaded = False

# Simple cache for config values to reduce file I/O
_config_cache = {}
_cache_valid = False
_cache_timestamp = 0
CACHE_TTL = 1.0  # Cache config for 1 second

CONFIG_PATH = "config.yaml"
CONFIG_PATH_ENV = "YTMP4_CONFIG"
lock = threading.Lock()

logger = logging.getLogger(__name__)

# ------------
# Environment variable mapping, checked before the YAML file
# ------------
ENV_MAPPINGS = {
    "download.output_dir": "YTMP4_OUTPUT_DIR",
    "youtube.proxy": "YTMP4_PROXY",
    "youtube.cookies_path": "YTMP4_COOKIES_PATH",
    "debug.log_level": "YTMP4_LOG_LEVEL",
}


def _get_yaml():
    """Lazy load YAML module only when needed"""
    global _yaml
    if _yaml is None:
        from ruamel.yaml import YAML

        _yaml = YAML(typ="safe")
    return _yaml


def _ensure_dotenv():
    """Lazy load environment variables only when needed"""
    global _dotenv_loaded
    if not _dotenv_loaded:
        from dotenv import load_dotenv

        load_dotenv()
        _dotenv_loaded = True


def get_config_path():
    """Config file location, overridable through YTMP4_CONFIG"""
    return os.getenv(CONFIG_PATH_ENV) or CONFIG_PATH


def invalidate_cache():
    """Invalidate the config cache (call when the config file or env changed)"""
    global _config_cache, _cache_valid, _cache_timestamp
    with lock:
        _config_cache = {}
        _cache_valid = False
        _cache_timestamp = 0


def _get_cached_config():
    """Get cached config data or load from file if cache is stale"""
    global _config_cache, _cache_valid, _cache_timestamp

    with lock:
        current_time = time.time()

        if _cache_valid and (current_time - _cache_timestamp) < CACHE_TTL:
            return _config_cache.copy()

        try:
            with open(get_config_path(), "r", encoding="utf-8") as file:
                data = _get_yaml().load(file) or {}
        except FileNotFoundError:
            data = {}

        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: top level is not a mapping", get_config_path())
            data = {}

        _config_cache = data
        _cache_valid = True
        _cache_timestamp = current_time
        return _config_cache.copy()


def _get_contract_default(key):
    from ytmp4.constants import ConfigContract

    return ConfigContract.DEFAULTS.get(key)


def _coerce(key, value):
    """Coerce a raw value to the contract type of ``key``; invalid values fall back to the default"""
    from ytmp4.constants import ConfigContract

    expected = ConfigContract.TYPES.get(key)
    if expected is None or value is None or isinstance(value, expected):
        return value
    try:
        return expected(value)
    except (TypeError, ValueError):
        default = _get_contract_default(key)
        logger.warning("Invalid value %r for %s, using default %r", value, key, default)
        return default


# -----------------------
# load config keys
# -----------------------


def load_key(key, default=None):
    """
    Resolve a dotted configuration key

    Lookup order: mapped environment variable, config.yaml, explicit default,
    then the contract default.
    """
    _ensure_dotenv()

    if key in ENV_MAPPINGS:
        env_value = os.getenv(ENV_MAPPINGS[key])
        if env_value:
            return _coerce(key, env_value.strip())

    data = _get_cached_config()

    value = data
    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default if default is not None else _get_contract_default(key)

    if (value is None or value == "") and default is not None:
        return default
    if value is None:
        return _get_contract_default(key)
    return _coerce(key, value)


def load_all_config():
    """Load complete YAML configuration as dict"""
    return _get_cached_config()
