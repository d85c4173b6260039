"""Top-level shortcut to the workflow transfer backend's application factory."""

from backend.app import Config, __version__, create_app

__all__ = ["Config", "__version__", "create_app"]
