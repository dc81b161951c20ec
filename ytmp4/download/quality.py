"""
Quality preference parsing
"""

import re

from .errors import InvalidQualityValueError
from .models import QualityPreference

_HEIGHT_PATTERN = re.compile(r"^(\d+)p?$", re.IGNORECASE)


def parse_quality(value) -> QualityPreference:
    """
    Parse a user supplied quality option

    Args:
        value (str): "highest", "lowest", or a height such as "720" / "720p"

    Returns:
        QualityPreference: Parsed preference

    Raises:
        InvalidQualityValueError: If the value is not a recognized option or a positive height
    """
    text = str(value).strip().lower() if value is not None else ""
    if text == "highest":
        return QualityPreference.highest()
    if text == "lowest":
        return QualityPreference.lowest()

    match = _HEIGHT_PATTERN.match(text)
    if not match or int(match.group(1)) <= 0:
        raise InvalidQualityValueError(str(value))
    return QualityPreference.target(int(match.group(1)))
