"""PlayMate - Steam profile, library and CS2 stats companion."""

__version__ = "0.1.0"
