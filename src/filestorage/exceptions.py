"""
Exception hierarchy for the file storage package.

Structural errors (bad registry input, unknown buckets or storages, broken
sub directory templates) are raised to the caller. Backend I/O failures are
not represented here: buckets log them and report ``False``.
"""


class FileStorageError(Exception):
    """Base class for all file storage errors."""


class InvalidArgumentError(FileStorageError, ValueError):
    """Raised on malformed registry input, e.g. a non-string bucket name."""


class UnknownPlaceholderError(FileStorageError, ValueError):
    """Raised when a sub directory template references an unknown placeholder."""

    def __init__(self, placeholder: str):
        self.placeholder = placeholder
        super().__init__(
            f"Unable to resolve file sub dir: unknown placeholder '{placeholder}'"
        )


class NotFoundError(FileStorageError, LookupError):
    """Raised when a requested bucket, storage or file does not exist."""


class BucketNotFoundError(NotFoundError):
    pass


class StorageNotFoundError(NotFoundError):
    pass


class FileNotFoundInBucketError(NotFoundError):
    def __init__(self, bucket_name: str, file_name: str):
        self.bucket_name = bucket_name
        self.file_name = file_name
        super().__init__(f"File '{file_name}' does not exist in bucket '{bucket_name}'")
