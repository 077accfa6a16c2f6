"""
Response envelopes for the FairOS REST API.

One pydantic model per success body the client consumes. Many numeric
values travel as JSON strings ("size": "1024"); they are declared as int
and pydantic's lax mode converts them, so a malformed number surfaces as
a validation error (DecodeFailedError at the transport) instead of a
silent default.

Error bodies share fairos_core.http.MessageResponse.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fairos_core.http import MessageResponse


def _none_as_empty(value):
    return [] if value is None else value


# =============================================================================
# User
# =============================================================================


class SignupResponse(BaseModel):
    """POST /user/signup. mnemonic is returned only when the service generated it."""

    address: str
    mnemonic: Optional[str] = None


class ImportResponse(BaseModel):
    address: str


class PresentResponse(BaseModel):
    """Existence checks: /user/present, /pod/present, /dir/present, /kv/present."""

    present: bool


class LoggedInResponse(BaseModel):
    loggedin: bool


class UserExportResponse(BaseModel):
    user_name: str
    address: str


class UserStatResponse(BaseModel):
    user_name: str
    address: str


# =============================================================================
# Pod
# =============================================================================


class PodShareResponse(BaseModel):
    pod_sharing_reference: str


class PodListResponse(BaseModel):
    pod_name: list[str] = Field(default_factory=list)
    shared_pod_name: list[str] = Field(default_factory=list)

    @field_validator("pod_name", "shared_pod_name", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return _none_as_empty(v)


class PodStatResponse(BaseModel):
    pod_name: str
    address: str


class PodReceiveInfoResponse(BaseModel):
    pod_name: str
    pod_address: str
    user_name: str
    user_address: str
    shared_time: str


# =============================================================================
# Directories and files
# =============================================================================


class DirEntryResponse(BaseModel):
    name: str
    content_type: str
    creation_time: int
    modification_time: int
    access_time: int


class FileEntryResponse(BaseModel):
    name: str
    content_type: str
    size: int
    block_size: int
    creation_time: int
    modification_time: int
    access_time: int


class DirListResponse(BaseModel):
    """GET /dir/ls. Either list may be null when empty."""

    dirs: Optional[list[DirEntryResponse]] = None
    files: Optional[list[FileEntryResponse]] = None


class DirStatResponse(BaseModel):
    pod_name: str
    dir_path: str
    dir_name: str
    creation_time: int
    modification_time: int
    access_time: int
    no_of_directories: int
    no_of_files: int


class UploadedFileName(BaseModel):
    file_name: str


class FileUploadResponse(BaseModel):
    """POST /file/upload: {"Responses": [{"file_name": ...}, ...]}."""

    model_config = ConfigDict(populate_by_name=True)

    responses: list[UploadedFileName] = Field(alias="Responses")

    def file_names(self) -> list[str]:
        """Uploaded file names in submission order."""
        return [entry.file_name for entry in self.responses]


class FileShareResponse(BaseModel):
    file_sharing_reference: str


class FileBlockResponse(BaseModel):
    name: str
    reference: str
    size: int
    compressed_size: int


class FileStatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pod_name: str
    file_path: str
    file_name: str
    content_type: str
    file_size: int
    block_size: int
    compression: str
    creation_time: int
    modification_time: int
    access_time: int
    blocks: Optional[list[FileBlockResponse]] = Field(default=None, alias="Blocks")


class FileReceiveResponse(BaseModel):
    file_name: str


class FileReceiveInfoResponse(BaseModel):
    pod_name: str
    name: str
    content_type: str
    size: int
    block_size: int
    number_of_blocks: int
    compression: str
    source_address: str
    dest_address: str
    shared_time: int


# =============================================================================
# Key-value stores
# =============================================================================


class KvCountResponse(BaseModel):
    count: int


class KvTableResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_name: str
    indexes: list[str] = Field(default_factory=list)
    index_type: str = Field(default="", alias="type")


class KvListResponse(BaseModel):
    """GET /kv/ls: {"Tables": [...]}."""

    model_config = ConfigDict(populate_by_name=True)

    tables: list[KvTableResponse] = Field(default_factory=list, alias="Tables")

    @field_validator("tables", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return _none_as_empty(v)


class KvEntryResponse(BaseModel):
    """GET /kv/entry/get and /kv/seek/next."""

    keys: list[str]
    values: str


# =============================================================================
# Document databases
# =============================================================================


class DocFieldResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    field_type: int = Field(alias="type")


class DocTableResponse(BaseModel):
    table_name: str
    indexes: list[DocFieldResponse] = Field(default_factory=list)


class DocListResponse(BaseModel):
    """GET /doc/ls: {"Tables": [...]}."""

    model_config = ConfigDict(populate_by_name=True)

    tables: list[DocTableResponse] = Field(default_factory=list, alias="Tables")

    @field_validator("tables", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return _none_as_empty(v)


class DocEntryResponse(BaseModel):
    """GET /doc/entry/get: base64-encoded JSON document."""

    doc: str


class DocFindResponse(BaseModel):
    """GET /doc/find: base64-encoded JSON documents."""

    docs: list[str] = Field(default_factory=list)

    @field_validator("docs", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return _none_as_empty(v)


__all__ = [
    "MessageResponse",
    "SignupResponse",
    "ImportResponse",
    "PresentResponse",
    "LoggedInResponse",
    "UserExportResponse",
    "UserStatResponse",
    "PodShareResponse",
    "PodListResponse",
    "PodStatResponse",
    "PodReceiveInfoResponse",
    "DirEntryResponse",
    "FileEntryResponse",
    "DirListResponse",
    "DirStatResponse",
    "UploadedFileName",
    "FileUploadResponse",
    "FileShareResponse",
    "FileBlockResponse",
    "FileStatResponse",
    "FileReceiveResponse",
    "FileReceiveInfoResponse",
    "KvCountResponse",
    "KvTableResponse",
    "KvListResponse",
    "KvEntryResponse",
    "DocFieldResponse",
    "DocTableResponse",
    "DocListResponse",
    "DocEntryResponse",
    "DocFindResponse",
]
