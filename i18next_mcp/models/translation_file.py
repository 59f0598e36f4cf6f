"""Data model for a loaded translation document."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from ..core.keypath import clone_tree


@dataclass
class TranslationDocument:
    """A parsed ``<language>/<namespace>.json`` file."""

    language: str
    namespace: str
    path: str
    content: Dict[str, Any] = field(default_factory=dict)
    last_modified: float = 0.0  # mtime, seconds since epoch
    size: int = 0

    @property
    def file_key(self) -> str:
        return f"{self.language}/{self.namespace}"

    def snapshot(self) -> "TranslationDocument":
        """Return a copy whose content can be mutated freely."""
        return TranslationDocument(
            language=self.language,
            namespace=self.namespace,
            path=self.path,
            content=clone_tree(self.content),
            last_modified=self.last_modified,
            size=self.size,
        )

    def to_dict(self, include_content: bool = False) -> dict:
        data = {
            "path": self.path,
            "language": self.language,
            "namespace": self.namespace,
            "size": self.size,
            "last_modified": datetime.fromtimestamp(self.last_modified).isoformat(),
        }
        if include_content:
            data["content"] = clone_tree(self.content)
        return data
