"""staffpitch — map taps on a grand staff to notes and tones."""

__version__ = "0.1.0"
