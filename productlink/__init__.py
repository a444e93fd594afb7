"""Share product record payloads through a single URL."""

__version__ = "0.1.0"
