"""Local persistence."""

from playmate.storage.local import DEFAULT_DATA_DIR, Storage

__all__ = ["DEFAULT_DATA_DIR", "Storage"]
