"""Audio-text synchronization engine for read-along playback."""

__version__ = "1.0.0"
