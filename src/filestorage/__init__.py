from .backends import AzureBlobBucket, AzureBlobStorage, LocalFileBucket, LocalFileStorage
from .base_bucket import BaseBucket
from .base_storage import BaseStorage
from .download import DownloadAction, FileDownload
from .exceptions import (
    BucketNotFoundError,
    FileNotFoundInBucketError,
    FileStorageError,
    InvalidArgumentError,
    NotFoundError,
    StorageNotFoundError,
    UnknownPlaceholderError,
)
from .factory import BucketTypeRegistry, StorageTypeRegistry
from .file_reference import BucketFile, FileReference, LocalFile
from .hub import StorageHub
from .interfaces import IBucket, IStorage
from .subdir_template import file_name_with_sub_dir, resolve_sub_dir

__all__ = [
    "AzureBlobBucket",
    "AzureBlobStorage",
    "BaseBucket",
    "BaseStorage",
    "BucketFile",
    "BucketNotFoundError",
    "BucketTypeRegistry",
    "DownloadAction",
    "FileDownload",
    "FileNotFoundInBucketError",
    "FileReference",
    "FileStorageError",
    "IBucket",
    "IStorage",
    "InvalidArgumentError",
    "LocalFile",
    "LocalFileBucket",
    "LocalFileStorage",
    "NotFoundError",
    "StorageHub",
    "StorageNotFoundError",
    "StorageTypeRegistry",
    "UnknownPlaceholderError",
    "file_name_with_sub_dir",
    "resolve_sub_dir",
]
