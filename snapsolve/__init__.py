"""Screenshot-to-answer extraction and synthesis core."""

__version__ = "0.1.0"
