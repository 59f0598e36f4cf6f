"""Key-path utilities and the translation file store."""
