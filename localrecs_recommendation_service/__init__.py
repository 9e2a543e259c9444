"""Content-based movie and series recommendations from local watch history."""

__version__ = "0.1.0"
