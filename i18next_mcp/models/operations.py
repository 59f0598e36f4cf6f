"""Data models for key mutation requests and their results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.keypath import MISSING


@dataclass
class KeyAddition:
    """Add ``key`` to every language x namespace target."""

    key: str
    value: Optional[str] = None
    default_value: str = ""
    values: Dict[str, str] = field(default_factory=dict)  # per-language values
    languages: Optional[List[str]] = None  # None = all configured
    namespaces: Optional[List[str]] = None
    overwrite: bool = False
    type: str = "add"


@dataclass
class KeyRemoval:
    key: str
    languages: Optional[List[str]] = None
    namespaces: Optional[List[str]] = None
    type: str = "remove"


@dataclass
class KeyRename:
    old_key: str
    new_key: str
    languages: Optional[List[str]] = None
    namespaces: Optional[List[str]] = None
    overwrite: bool = False
    type: str = "rename"


@dataclass
class KeyConflict:
    """``key`` already holds a value where an add/rename wanted to write."""

    key: str
    language: str
    namespace: str
    existing_value: Any

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "language": self.language,
            "namespace": self.namespace,
            "existing_value": self.existing_value,
        }


@dataclass
class OperationEntry:
    """One write applied to one document."""

    type: str  # add, remove, rename, sync
    key: str
    language: str
    namespace: str
    value: Any = MISSING
    new_key: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        data = {
            "type": self.type,
            "key": self.key,
            "language": self.language,
            "namespace": self.namespace,
            "timestamp": self.timestamp,
        }
        if self.new_key is not None:
            data["new_key"] = self.new_key
        if self.value is not MISSING:
            data["value"] = self.value
        return data


@dataclass
class OperationResult:
    """Outcome of a key mutation, possibly spanning many documents."""

    success: bool = True
    operations: List[OperationEntry] = field(default_factory=list)
    conflicts: List[KeyConflict] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.success = False

    def merge(self, other: "OperationResult") -> None:
        self.operations.extend(other.operations)
        self.conflicts.extend(other.conflicts)
        self.errors.extend(other.errors)
        if not other.success:
            self.success = False

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "operations": [op.to_dict() for op in self.operations],
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "errors": list(self.errors),
        }


@dataclass
class SyncPlanEntry:
    """Keys missing from one target file in a cross-language sync."""

    language: str
    namespace: str
    missing_keys: List[str]
    action: str  # preview, sync, create_file

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "namespace": self.namespace,
            "missing_keys": list(self.missing_keys),
            "action": self.action,
        }


@dataclass
class SyncReport:
    """Outcome of syncing missing keys from a source language."""

    dry_run: bool
    target_languages: List[str]
    namespaces: List[str]
    operations: List[SyncPlanEntry] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def total_keys(self) -> int:
        return sum(len(entry.missing_keys) for entry in self.operations)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "dry_run": self.dry_run,
            "operations": [entry.to_dict() for entry in self.operations],
            "errors": list(self.errors),
            "summary": {
                "total_operations": len(self.operations),
                "total_keys_to_sync": self.total_keys,
                "target_languages": len(self.target_languages),
                "namespaces": len(self.namespaces),
            },
        }
