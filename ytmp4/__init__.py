"""
ytmp4 - download a YouTube video as an MP4 file
"""

__version__ = "0.2.0"
