"""Web page metadata cache with per-URL fetch coordination."""

__version__ = "0.1.0"
