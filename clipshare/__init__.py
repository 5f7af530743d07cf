"""Clipshare — social graph and read-model core for a content-sharing platform."""

__version__ = "1.0.0"
