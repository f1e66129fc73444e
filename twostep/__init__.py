"""Two-step login client: credential login followed by a one-time code."""

__version__ = "0.1.0"
