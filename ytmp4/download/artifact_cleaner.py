"""
Debug artifact cleanup
Single responsibility: Remove stray debug files left behind by the extraction backend
"""

import logging
import os
import re
from typing import List, Optional

from ytmp4.constants import FileConstants

logger = logging.getLogger(__name__)


class DebugArtifactCleaner:
    """Best-effort removal of numbered player-script dumps from a directory"""

    def __init__(self, pattern: str = FileConstants.DEBUG_ARTIFACT_PATTERN):
        try:
            self.pattern = re.compile(pattern)
        except re.error as e:
            logger.warning("Invalid debug artifact pattern %r (%s), using default", pattern, e)
            self.pattern = re.compile(FileConstants.DEBUG_ARTIFACT_PATTERN)

    def cleanup(self, directory: Optional[str] = None) -> List[str]:
        """
        Remove files whose names match the artifact pattern

        Never raises: every failure is logged at debug level and skipped.

        Args:
            directory (str, optional): Directory to clean, current directory by default

        Returns:
            list: Names of removed files
        """
        cleaned_files = []

        try:
            # the working directory itself may have been removed
            directory = directory or os.getcwd()
            names = os.listdir(directory)
        except OSError as e:
            logger.debug("Could not list %s for cleanup: %s", directory, e)
            return cleaned_files

        for name in names:
            if not self.pattern.match(name):
                continue
            file_path = os.path.join(directory, name)
            try:
                if os.path.isfile(file_path):
                    os.remove(file_path)
                    cleaned_files.append(name)
            except OSError as e:
                logger.debug("Could not remove %s: %s", file_path, e)

        if cleaned_files:
            logger.debug("Cleaned up debug artifacts: %s", ", ".join(cleaned_files))
        return cleaned_files
