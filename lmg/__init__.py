"""LMG: retry and chunked generation of video learning materials."""

__version__ = "0.1.0"
