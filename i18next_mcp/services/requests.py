"""Request models for tool arguments."""

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class EmptyRequest(BaseModel):
    pass


class ScopeRequest(BaseModel):
    languages: Optional[List[str]] = None
    namespaces: Optional[List[str]] = None


class HealthCheckRequest(ScopeRequest):
    detailed: bool = False
    summary: bool = False


class ValidateFilesRequest(BaseModel):
    fix: bool = False


class ListFilesRequest(BaseModel):
    language: Optional[str] = None
    namespace: Optional[str] = None


class ExportRequest(ScopeRequest):
    format: Literal["json", "csv", "gettext"] = "json"


class MissingKeysRequest(BaseModel):
    source_language: Optional[str] = None
    target_languages: Optional[List[str]] = None
    namespaces: Optional[List[str]] = None
    format: Literal["detailed", "summary", "flat"] = "detailed"


class SyncMissingRequest(BaseModel):
    source_language: Optional[str] = None
    target_languages: Optional[List[str]] = None
    namespaces: Optional[List[str]] = None
    placeholder: str = ""
    copy_values: bool = True
    dry_run: bool = False
    create_backup: bool = True


class SyncAllMissingRequest(BaseModel):
    placeholder: str = ""
    dry_run: bool = False
    create_backup: bool = True


class SyncFromSourceRequest(BaseModel):
    keys: List[str] = Field(min_length=1)
    target_languages: List[str] = Field(min_length=1)
    source_language: Optional[str] = None
    namespaces: Optional[List[str]] = None
    copy_values: bool = False
    create_backup: bool = True


class SyncNamespacesRequest(BaseModel):
    source_namespace: str
    target_namespaces: List[str] = Field(min_length=1)
    language: Optional[str] = None
    copy_values: bool = False


class AddKeyRequest(BaseModel):
    key: str = Field(min_length=1)
    translations: Dict[str, str] = {}
    default_value: str = ""
    languages: Optional[List[str]] = None
    namespaces: Optional[List[str]] = None
    overwrite: bool = False


class RemoveKeyRequest(BaseModel):
    key: str = Field(min_length=1)
    languages: Optional[List[str]] = None
    namespaces: Optional[List[str]] = None


class RenameKeyRequest(BaseModel):
    old_key: str = Field(min_length=1)
    new_key: str = Field(min_length=1)
    languages: Optional[List[str]] = None
    namespaces: Optional[List[str]] = None
    overwrite: bool = False


class AddOperation(AddKeyRequest):
    type: Literal["add"] = "add"


class RemoveOperation(RemoveKeyRequest):
    type: Literal["remove"] = "remove"


class RenameOperation(RenameKeyRequest):
    type: Literal["rename"] = "rename"


KeyOperationRequest = Annotated[
    Union[AddOperation, RemoveOperation, RenameOperation], Field(discriminator="type")
]


class BatchRequest(BaseModel):
    operations: List[KeyOperationRequest]
    create_backup: bool = False
    continue_on_error: bool = False
