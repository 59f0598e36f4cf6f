"""Key mutation and synchronization."""

from .key_manager import KeyManager

__all__ = ["KeyManager"]
