"""
Async Python client for the FairOS-dfs storage service.

Modules:
    client      - FairOSClient combining every operation group
    user        - Account signup, login, import and info
    pod         - Pod lifecycle and sharing
    filesystem  - Directories, file upload/download and sharing
    kv          - Key-value stores, CSV loading, range seeks
    doc         - Document databases and filtered queries
    expr        - Document filter expressions
    blocksize   - Unit-scaled block sizes
    seek        - Lazy key-value range stream
    config      - ClientConfig loading from YAML and environment
"""

from fairos.blocksize import BlockSize, Bytes, Gigabytes, Kilobytes, Megabytes, Terabytes
from fairos.client import FairOSClient
from fairos.config import ClientConfig, load_config
from fairos.doc import DocumentDatabase, FieldType
from fairos.expr import All, And, Eq, Expr, Gt, Gte, Lt, Lte, Map, Number, Or, Str, compile_expr
from fairos.filesystem import (
    Compression,
    DirEntry,
    DirInfo,
    FileBlock,
    FileEntry,
    FileInfo,
    SharedFileInfo,
)
from fairos.kv import IndexType, KeyValueStore
from fairos.pod import PodInfo, SharedPodInfo
from fairos.seek import KeyValueSeek
from fairos.user import UserExport, UserInfo, generate_mnemonic

__version__ = "0.1.0"

__all__ = [
    # Client
    "FairOSClient",
    "ClientConfig",
    "load_config",
    # User / pod
    "UserExport",
    "UserInfo",
    "generate_mnemonic",
    "PodInfo",
    "SharedPodInfo",
    # Filesystem
    "BlockSize",
    "Bytes",
    "Kilobytes",
    "Megabytes",
    "Gigabytes",
    "Terabytes",
    "Compression",
    "DirEntry",
    "DirInfo",
    "FileBlock",
    "FileEntry",
    "FileInfo",
    "SharedFileInfo",
    # Key-value
    "IndexType",
    "KeyValueStore",
    "KeyValueSeek",
    # Documents
    "DocumentDatabase",
    "FieldType",
    "Expr",
    "All",
    "Eq",
    "Gt",
    "Gte",
    "Lt",
    "Lte",
    "And",
    "Or",
    "Str",
    "Number",
    "Map",
    "compile_expr",
]
