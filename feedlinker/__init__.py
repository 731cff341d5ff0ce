"""Feedlinker - resolves torrent feed titles to media catalog links."""

__version__ = "0.1.0"
