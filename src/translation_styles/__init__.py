"""Build and curate custom translation memories from parallel documents."""

__version__ = "0.1.0"
